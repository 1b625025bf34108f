"""Reward catalog loaded from JSON at startup.

File shape:
    {"rewards": {"<rewardId>": {"name": "...", "cost": 500}}}

A missing or malformed catalog stops the server at startup instead of failing
individual redemptions later.
"""

import json
import os

DEFAULT_CATALOG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "rewards.json")


def catalog_path() -> str:
    return os.getenv("REWARDS_CATALOG_PATH") or DEFAULT_CATALOG_PATH


def load_catalog(path: str) -> dict:
    """Return {reward_id: {"id", "name", "cost"}}; raise RuntimeError on bad input."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
    except (OSError, ValueError) as e:
        raise RuntimeError(f"Reward catalog unreadable at {path}: {e}") from e

    rewards = raw.get("rewards") if isinstance(raw, dict) else None
    if not isinstance(rewards, dict) or not rewards:
        raise RuntimeError(f"Reward catalog at {path} has no 'rewards' object")

    catalog = {}
    for reward_id, entry in rewards.items():
        if not isinstance(entry, dict):
            raise RuntimeError(f"Reward '{reward_id}' must be an object")
        name = str(entry.get("name") or "").strip()
        cost = entry.get("cost")
        if not name or isinstance(cost, bool) or not isinstance(cost, int) or cost < 0:
            raise RuntimeError(f"Reward '{reward_id}' needs a name and a non-negative integer cost")
        catalog[str(reward_id)] = {"id": str(reward_id), "name": name, "cost": cost}
    return catalog
