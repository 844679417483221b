import argparse
import logging
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from receitas.app.infra.db.supabase_recipes_repo import SupabaseRecipeRepository

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Rewrite legacy recipe rows (string lists, camelCase keys) in the current schema"
    )
    parser.add_argument("--dry-run", action="store_true", help="Only report what would change")
    parser.add_argument("--page-size", type=int, default=200)
    args = parser.parse_args()

    repo = SupabaseRecipeRepository()
    count = repo.migrate_legacy_documents(dry_run=args.dry_run, page_size=args.page_size)
    verb = "would be migrated" if args.dry_run else "migrated"
    print(f"{count} legacy recipe(s) {verb}")


if __name__ == "__main__":
    main()
