"""
Credential helpers for the Kraken REST client.

Loads a .env file and finds Kraken API credentials with a clear precedence:

1. Explicit environment variables (e.g., KRAKEN_API_KEY)
2. Variables loaded from a .env file (never override 1.)
3. CI secrets exposed with a COPILOT_ or copilot_ prefix

Functions:
- load_env(env_file='.env') -> loads .env into os.environ if not present
- get_env_var(name) -> checks name, COPILOT_ and copilot_ prefixed variants
- find_kraken_credentials(readwrite=False) -> returns (key, secret) tuple
- find_api_url(default) -> KRAKEN_API_URL or the default
"""
from __future__ import annotations

import os
import sys
from typing import Tuple, Optional


def load_env(env_file: str = '.env') -> None:
    """Load KEY=VALUE pairs from a .env file into os.environ when missing.

    Existing environment variables are not overridden. Blank lines, comments
    and lines without '=' are skipped; matching surrounding quotes are removed.
    """
    if not os.path.exists(env_file):
        return

    try:
        with open(env_file, 'r') as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                if line.startswith('export '):
                    line = line[len('export '):].lstrip()
                if '=' not in line:
                    continue
                key, val = line.split('=', 1)
                key = key.strip()
                val = val.strip()
                if len(val) >= 2 and val[0] == val[-1] and val[0] in ('"', "'"):
                    val = val[1:-1]
                if key and key not in os.environ:
                    os.environ[key] = val
    except OSError as e:
        print(f"Warning: failed to load env file {env_file}: {e}", file=sys.stderr)


def get_env_var(name: str) -> Optional[str]:
    """Get environment variable checking multiple variants.

    Order of precedence:
      1. Exact name in os.environ
      2. 'COPILOT_' prefixed name (GitHub secrets style)
      3. 'copilot_' prefixed name
    Empty values are treated as missing.
    """
    for variant in (name, f"COPILOT_{name}", f"copilot_{name}"):
        val = os.environ.get(variant)
        if val:
            return val
    return None


def find_kraken_credentials(readwrite: bool = False, env_file: str = '.env') -> Tuple[Optional[str], Optional[str]]:
    """Find Kraken credentials.

    If `readwrite` is True, look for read-write keys (KRAKEN_API_KEY_RW / KRAKEN_API_SECRET_RW).
    Otherwise look for read-only keys (KRAKEN_API_KEY / KRAKEN_API_SECRET).

    Returns: (key, secret) or (None, None) if not found.
    """
    load_env(env_file)

    suffix = '_RW' if readwrite else ''
    key = get_env_var(f'KRAKEN_API_KEY{suffix}')
    secret = get_env_var(f'KRAKEN_API_SECRET{suffix}')
    return key, secret


def find_api_url(default: str) -> str:
    """Base URL override from KRAKEN_API_URL, e.g. for a local test server."""
    return get_env_var('KRAKEN_API_URL') or default
