"""
OAuth Configuration - Single Source of Truth

All OAuth and API client parameters defined here. Do not duplicate elsewhere.
Obtaining and refreshing the token is outside unfold; it only reads it.
"""

import os
from pathlib import Path

# Package root (where this file lives)
_PACKAGE_ROOT = Path(__file__).parent

# Read-only: unfold never writes to Docs or Gmail
SCOPES = [
    'https://www.googleapis.com/auth/documents.readonly',
    'https://www.googleapis.com/auth/gmail.readonly',
]

# Authorized-user token (google-auth format). Absolute path so it works
# regardless of cwd.
TOKEN_FILE = Path(os.environ.get("UNFOLD_TOKEN_FILE", _PACKAGE_ROOT / 'token.json'))

# Timeout for all Google API calls (seconds)
API_TIMEOUT = int(os.environ.get("UNFOLD_API_TIMEOUT", 60))
