#!/usr/bin/env python3
"""
s3compat command-line runner

Usage:
    python run.py providers                       # List supported providers
    python run.py providers cloudflare_r2         # Show a provider's regions
    python run.py endpoint wasabi -r eu-central-1 # Resolve an endpoint
    python run.py ls my-bucket --prefix photos/   # List objects (connections.json)
    python run.py -n r2 presign my-bucket a.txt   # Presigned URL for connection r2
    python run.py -j out.json cors my-bucket      # Also write JSON output
"""

import sys
from s3compat.cli import main

if __name__ == "__main__":
    sys.exit(main())
