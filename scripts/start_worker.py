#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Starts a Celery worker with an embedded beat scheduler, so the expired-story
# sweep runs without a separate beat process.
#
# Usage:
#   python scripts/start_worker.py
#
#   # Or use Celery CLI directly (worker and beat separately)
#   celery -A workers.celery_app worker --loglevel=info -Q default,media
#   celery -A workers.celery_app beat --loglevel=info
#
# Prerequisites:
#   - Redis must be running
#   - Environment variables must be set (.env file)
# =============================================================================

from workers.celery_app import celery_app


def main():
    """Start the Celery worker with beat."""
    print("=" * 60)
    print("Patwa Toli Media Worker")
    print("=" * 60)
    print()
    print("Starting worker (with beat)...")
    print("Press Ctrl+C to stop")
    print()

    celery_app.worker_main([
        "worker",
        "--beat",
        "--loglevel=info",
        "--concurrency=2",
        "--queues=default,media",
    ])


if __name__ == "__main__":
    main()
