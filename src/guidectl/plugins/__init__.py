"""Plugin system for guidectl.

Third-party plugins implement hooks marked with :data:`hookimpl`.
"""

from __future__ import annotations

import pluggy

hookimpl = pluggy.HookimplMarker("guidectl")
