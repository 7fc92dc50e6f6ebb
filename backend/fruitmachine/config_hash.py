"""Machine configuration hash shared by telemetry and the audit script.

The hash MUST be computed identically in both places so audit rows can be
matched with spin_settled telemetry.
"""
import hashlib
import json

from fruitmachine.logic.models import MachineConfig


def get_config_hash(config: MachineConfig) -> str:
    """
    Generate hash of a machine configuration.

    Returns 16-char hex hash of the canonical JSON dump. Used for:
    - audit CSV config_hash column
    - spin_settled telemetry event config_hash field
    """
    canonical = json.dumps(config.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode()).hexdigest()[:16]
