"""
This is the main file for the web application.
It exposes the entity store operations (load, edit, save, rollback) as JSON
routes for the map editor UI.
"""

from decimal import Decimal, InvalidOperation
from flask import Flask, request, jsonify
import logging
from typing import Any, Dict, Optional

import config

# --- Logging Configuration ---
logging.basicConfig(level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO), format=config.LOG_FORMAT)

# --- Core Imports ---
from core.errors import EntityDeletedError, MapToolError, MissingFileError, PersistenceError
from core.session import EntityStore, load_store
from entities.province import PopDef, ProvinceInfo
from parsing.fields import format_decimal

app = Flask(__name__)

# The store is created by /load; nothing is read at import time
store: Optional[EntityStore] = None


def province_to_json(province: ProvinceInfo) -> Dict[str, Any]:
    location = province.location_info
    return {
        "id": province.id,
        "name": province.name,
        "origin_name": province.origin_name,
        "unnamed": province.unnamed,
        "state": store.state_of(province.id).value if store else None,
        "location": {
            name: getattr(location, name) for name in config.LOCATION_FIELDS
        },
        "pops": [
            {
                "type": pop.pop_type,
                "size": format_decimal(pop.size),
                "culture": pop.culture,
                "religion": pop.religion,
            }
            for pop in province.pop_info.pops
        ],
    }


def _require_store():
    if store is None:
        return jsonify({"error": "No mod loaded. POST /load first."}), 409
    return None


# --- Routes ---

@app.route("/load", methods=["POST"])
def load():
    """Loads a base game and mod directory into a fresh store."""
    global store
    data = request.json or {}
    mod_dir = data.get("mod_dir")
    base_dir = data.get("base_dir")
    logging.info("Received load request: base_dir=%s, mod_dir=%s", base_dir, mod_dir)
    if not mod_dir:
        return jsonify({"error": "Missing mod_dir"}), 400
    try:
        store = load_store(base_dir, mod_dir, data.get("backup_dir"))
    except MissingFileError as e:
        logging.error("Load failed: %s", e)
        return jsonify({"error": str(e)}), 404
    except MapToolError as e:
        logging.error("Load failed: %s", e)
        return jsonify({"error": str(e)}), 422
    count = len(store.provinces.get_all())
    logging.info("Loaded %d provinces.", count)
    return jsonify({"message": f"Loaded {count} provinces", "count": count})


@app.route("/provinces", methods=["GET"])
def list_provinces():
    missing = _require_store()
    if missing:
        return missing
    name_filter = request.args.get("name", "").casefold()
    provinces = store.provinces.find(lambda p: name_filter in p.name.casefold())
    return jsonify({"provinces": [province_to_json(p) for p in provinces]})


@app.route("/provinces/<province_id>", methods=["GET"])
def get_province(province_id):
    missing = _require_store()
    if missing:
        return missing
    province = store.get(province_id)
    if province is None:
        return jsonify({"error": f"Province '{province_id}' not found."}), 404
    return jsonify(province_to_json(province))


@app.route("/provinces/<province_id>/paint", methods=["POST"])
def paint_location(province_id):
    """Sets location attributes, creating the province if it does not exist."""
    missing = _require_store()
    if missing:
        return missing
    attributes = request.json or {}
    try:
        province = store.paint_location(province_id, **attributes)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except EntityDeletedError as e:
        return jsonify({"error": str(e.args[0])}), 409
    return jsonify(province_to_json(province))


@app.route("/provinces/<province_id>/pops", methods=["POST"])
def paint_pops(province_id):
    missing = _require_store()
    if missing:
        return missing
    data = request.json or {}
    try:
        pops = [
            PopDef(
                pop_type=pop["type"],
                size=Decimal(str(pop.get("size", config.DEFAULT_POP_SIZE))),
                culture=pop["culture"],
                religion=pop["religion"],
            )
            for pop in data.get("pops", [])
        ]
    except (KeyError, TypeError, InvalidOperation) as e:
        logging.error("Bad pop payload for %s: %s", province_id, e)
        return jsonify({"error": f"Each pop needs type, size, culture and religion: {e}"}), 400
    if any(not pop.size.is_finite() for pop in pops):
        return jsonify({"error": "Pop sizes must be finite numbers."}), 400
    try:
        province = store.paint_pops(province_id, pops)
    except EntityDeletedError as e:
        return jsonify({"error": str(e.args[0])}), 409
    return jsonify(province_to_json(province))


@app.route("/provinces/<province_id>/rename", methods=["POST"])
def rename_province(province_id):
    missing = _require_store()
    if missing:
        return missing
    new_name = (request.json or {}).get("name")
    if not new_name:
        return jsonify({"error": "Missing name"}), 400
    try:
        province = store.rename(province_id, new_name)
    except KeyError as e:
        return jsonify({"error": str(e.args[0])}), 404
    except ValueError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify(province_to_json(province))


@app.route("/provinces/<province_id>", methods=["DELETE"])
def delete_province(province_id):
    missing = _require_store()
    if missing:
        return missing
    try:
        store.delete(province_id)
    except KeyError as e:
        return jsonify({"error": str(e.args[0])}), 404
    return jsonify({"message": f"Province {province_id} deleted"})


@app.route("/changes", methods=["GET"])
def changes():
    missing = _require_store()
    if missing:
        return missing
    return jsonify(
        {
            "count": store.change_count(),
            "summary": store.unit_of_work.change_summary(),
            "changed": [
                {"id": p.id, "name": p.name, "state": store.state_of(p.id).value}
                for p in store.get_changed()
            ],
        }
    )


@app.route("/save", methods=["POST"])
def save():
    missing = _require_store()
    if missing:
        return missing
    try:
        saved = store.save_changes()
    except PersistenceError as e:
        logging.error("Save failed: %s", e)
        return jsonify({"error": str(e)}), 500
    return jsonify({"message": f"Saved {saved} provinces", "saved": saved})


@app.route("/rollback", methods=["POST"])
def rollback():
    missing = _require_store()
    if missing:
        return missing
    try:
        store.rollback()
    except MapToolError as e:
        logging.error("Reload failed: %s", e)
        return jsonify({"error": str(e)}), 500
    return jsonify({"message": "Changes discarded", "count": len(store.provinces.get_all())})


@app.route("/definitions/<category>", methods=["GET"])
def definitions(category):
    """Lists valid values for a category, filtered by an optional ``q`` query."""
    missing = _require_store()
    if missing:
        return missing
    if category not in config.DEFINITION_CATEGORIES:
        return jsonify({"error": f"Unknown category '{category}'"}), 404
    query = request.args.get("q", "")
    limit = request.args.get("limit", config.SUGGESTION_LIMIT, type=int)
    values = store.definitions.suggest(category, query, limit=limit)
    return jsonify({"category": category, "values": values})


# Add error handler for 404
@app.errorhandler(404)
def page_not_found(e):
    return jsonify({"error": "Not found"}), 404


# Add error handler for 500
@app.errorhandler(500)
def internal_server_error(e):
    logging.exception("Internal Server Error")
    return jsonify({"error": "Internal server error"}), 500


# --- Run the App ---
if __name__ == "__main__":
    # Debug mode is helpful during development
    app.run(port=5001, debug=True)
