import argparse
import logging

import web_app
from core.session import load_store


def main():
    """Starts the map tool server, optionally loading a mod right away."""
    parser = argparse.ArgumentParser(description="EU5 map tool server")
    parser.add_argument("--mod-dir", help="Root directory of the mod to edit")
    parser.add_argument("--base-dir", help="Root directory of the base game install")
    parser.add_argument("--backup-dir", help="Where to keep backups while saving")
    parser.add_argument("--port", type=int, default=5001)
    args = parser.parse_args()

    print("Launching EU5 Map Tool...")
    if args.mod_dir:
        web_app.store = load_store(args.base_dir, args.mod_dir, args.backup_dir)
        logging.info("Preloaded %d provinces.", len(web_app.store.provinces.get_all()))
    web_app.app.run(port=args.port)


if __name__ == "__main__":
    main()
