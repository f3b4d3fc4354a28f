"""CLI entry point for manual syncs, store statistics and one-off recommendation queries."""

import argparse
import json
import logging
import sys

from jobsforce.config import load_config, validate_config
from jobsforce.pipeline import sync_now
from jobsforce.recommendations import RecommendationQuery
from jobsforce.scheduler import collect_skill_union
from jobsforce.services import Services, build_services
from jobsforce.utils.logging_config import setup_logging

logger = logging.getLogger("jobsforce")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="JobsForce - job ingestion and recommendation backend",
    )
    parser.add_argument(
        "--config", default="config.yaml",
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "--sync-now", action="store_true",
        help="Run one job sync using the skills of all users and exit",
    )
    parser.add_argument(
        "--limit", type=int, default=None,
        help="Job limit for --sync-now or --recommend",
    )
    parser.add_argument(
        "--stats", action="store_true",
        help="Print listing store statistics and exit",
    )
    parser.add_argument(
        "--recommend", type=int, metavar="USER_ID", default=None,
        help="Print recommendations for a user as JSON and exit",
    )
    parser.add_argument(
        "--refresh", action="store_true",
        help="With --recommend: force a live refresh from the ML service",
    )
    return parser.parse_args(argv)


def print_stats(services: Services):
    """Print listing store statistics."""
    stats = services.store.get_stats()
    print("\n=== JobsForce Statistics ===")
    print(f"Total listings: {stats['total_listings']}")
    print(f"Users: {services.users.count()}")
    if stats["average_match_score"] is not None:
        print(f"Average match score: {stats['average_match_score']:.3f}")
    if stats["newest_scrape"]:
        print(f"Newest scrape: {stats['newest_scrape']}")

    if stats.get("by_source"):
        print("\nListings by source:")
        for source, count in stats["by_source"].items():
            print(f"  {source or 'unknown'}: {count}")
    print()


def run_manual_sync(services: Services, limit: int) -> dict:
    skills = collect_skill_union(services.users)
    if not skills:
        logger.warning("No user skills found - nothing to sync")
        return {"success": False, "error": "No skills found"}
    return sync_now(services, skills, limit)


def run_recommend(services: Services, user_id: int, limit: int | None, refresh: bool) -> int:
    user = services.users.get(user_id)
    if user is None:
        print(f"Error: user {user_id} not found", file=sys.stderr)
        return 1

    services.writer.start()
    try:
        query = RecommendationQuery(
            limit=limit or services.config.recommendations.default_limit,
            refresh=refresh,
        )
        result = services.recommender.recommend(user, query)
        print(json.dumps(result.to_dict(), indent=2))
    finally:
        # Let fire-and-forget writes land before the process exits
        services.writer.stop()
    return 0 if result.success else 1


def main(argv=None):
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.log_dir)

    for w in validate_config(config):
        logger.warning("Config: %s", w)

    services = build_services(config)

    if args.stats:
        print_stats(services)
        return

    if args.sync_now:
        result = run_manual_sync(services, args.limit or config.sync.manual_limit)
        print(json.dumps(result, indent=2))
        if not result.get("success"):
            sys.exit(1)
        return

    if args.recommend is not None:
        sys.exit(run_recommend(services, args.recommend, args.limit, args.refresh))

    print("Nothing to do. Use --sync-now, --stats or --recommend (see --help).", file=sys.stderr)
    sys.exit(2)


if __name__ == "__main__":
    main()
