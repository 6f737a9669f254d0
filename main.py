"""Run the caregiver matching API under uvicorn.

    python main.py [--host 0.0.0.0] [--port 8000]

Reloads on source changes when DEBUG is set.
"""
import argparse

import uvicorn

from be.config import settings


def describe_matching() -> str:
    matching = settings.matching
    timeout = f"{matching.timeout_seconds}s" if matching.timeout_seconds else "off"
    return f"min_score={matching.min_score} timeout={timeout} max_limit={matching.max_limit}"


def main() -> None:
    parser = argparse.ArgumentParser(description="Patient to caregiver matching API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    embeddings = settings.embeddings
    print(f"{settings.app_name} v{settings.version} on {args.host}:{args.port}")
    print(
        f"Embedding model: {embeddings.model_name} ({embeddings.device}, "
        f"{'preloaded' if embeddings.preload else 'lazy'})"
    )
    print(f"Matching: {describe_matching()}")

    uvicorn.run(
        "be.api:app",
        host=args.host,
        port=args.port,
        reload=settings.debug,
        reload_dirs=["be", "ai", "config"] if settings.debug else None,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
