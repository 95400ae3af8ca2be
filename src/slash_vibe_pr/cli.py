"""Console entrypoint (`slash-vibe-pr`).

The implementation lives in `slash_vibe_pr.main`.
"""

from __future__ import annotations

from slash_vibe_pr.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
