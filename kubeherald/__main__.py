"""Entry point for `python -m kubeherald`.

Usage:
    python -m kubeherald
    KUBEHERALD_CONFIG_PATH=/etc/kubeherald python -m kubeherald
"""

from __future__ import annotations

import asyncio

from kubeherald.app import main

asyncio.run(main())
