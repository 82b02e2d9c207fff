"""
Script to load data into the database.

    python seed_db.py                      # sample profiles, coffee shops, reviews and pins
    python seed_db.py --ingest             # real Yelp ingestion for the default localities
    python seed_db.py --ingest "McAllen, TX" --max-per-locality 10

Ingestion needs YELP_API_KEY in the environment (or .env).
"""
import argparse
import asyncio

from dotenv import load_dotenv
from sqlalchemy.orm import Session

from app.db.session import SessionLocal, init_db
from app.schemas.ingest import IngestRequest
from app.seed.seed_data import seed_db
from app.services.ingestion import run_ingestion
from app.services.yelp_client import YelpClient

# Load environment variables
load_dotenv()


def parse_args():
    parser = argparse.ArgumentParser(description="Seed sample data or ingest coffee shops from Yelp.")
    parser.add_argument(
        "--ingest",
        nargs="*",
        metavar="LOCALITY",
        help="Ingest from Yelp instead of seeding; no localities means the configured defaults",
    )
    parser.add_argument("--max-per-locality", type=int, default=50)
    parser.add_argument("--min-rating", type=float, default=3.0)
    parser.add_argument("--include-chains", action="store_true")
    return parser.parse_args()


def ingest(db: Session, args) -> None:
    request = IngestRequest(
        localities=args.ingest or None,
        max_per_locality=args.max_per_locality,
        min_rating=args.min_rating,
        exclude_chains=not args.include_chains,
    )
    results = asyncio.run(run_ingestion(db, YelpClient.from_settings(), request))
    for stats in results.per_locality:
        print(
            f"  {stats.locality}: count={stats.count} processed={stats.processed} "
            f"skipped={stats.skipped} filtered={stats.filtered}"
        )
    print(
        f"Total: {results.total}, processed: {results.processed}, "
        f"skipped: {results.skipped}, filtered: {results.filtered}"
    )
    for error in results.errors:
        print(f"  error: {error}")


def main():
    args = parse_args()

    print("Initializing database...")
    init_db()

    db: Session = SessionLocal()
    try:
        if args.ingest is not None:
            print("Ingesting businesses from Yelp...")
            ingest(db, args)
        else:
            print("Seeding database...")
            seed_db(db)
    finally:
        db.close()
    print("Done!")


if __name__ == "__main__":
    main()
