"""
Plan Classifier REST API

Flask service exposing the classification engine over HTTP, plus the cached
reference CSVs under /data. Reference data is refreshed in the background
at startup and on demand; requests are served from whatever tables are
loaded at the time.
"""

import logging
import os
import threading

from flask import Flask, request, jsonify, send_from_directory

from plan_classifier import ClassificationEngine, ReferenceStore, SOURCE_CONFIG
from plan_classifier.batch import classify_records
from plan_classifier.reference.refresh import (
    load_cached_reference_data,
    start_background_refresh,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)

app = Flask(__name__)
app.config['DATA_DIR'] = SOURCE_CONFIG["data_dir"]
app.config['MAX_BATCH_SIZE'] = 5000
# Load reference data when the module is imported (WSGI servers never run __main__)
app.config['REFRESH_ON_STARTUP'] = os.environ.get('PLAN_CLASSIFIER_REFRESH_ON_STARTUP', '1') == '1'

# Shared engine; the reference store is swapped in place by refreshes
engine = ClassificationEngine(ReferenceStore())

_startup_lock = threading.Lock()
_startup_done = False


def start_reference_loading():
    """
    Warm-start from the cached CSVs and begin a background refresh.

    Runs at most once per process; later calls return False.
    """
    global _startup_done
    with _startup_lock:
        if _startup_done:
            return False
        _startup_done = True

    data_dir = app.config['DATA_DIR']
    # Serve from the last cached copy until the downloads finish
    load_cached_reference_data(engine.store, cache_dir=data_dir)
    start_background_refresh(engine.store, cache_dir=data_dir)
    return True


@app.route('/health', methods=['GET'])
def health():
    """Liveness plus reference data status."""
    snapshot = engine.store.snapshot
    return jsonify({
        'ok': True,
        'referenceDataLoaded': snapshot.is_loaded,
        'sources': snapshot.source_counts(),
    })


@app.route('/api/classify', methods=['POST'])
def classify():
    """
    Classify one card.

    Expects a JSON object with optional string fields memberId, group, bin
    and pcn. Malformed or non-object bodies are classified as an empty card.
    """
    body = request.get_json(silent=True)
    result = engine.classify(body if isinstance(body, dict) else {})
    return jsonify(result.to_dict())


@app.route('/api/classify/batch', methods=['POST'])
def classify_batch():
    """
    Classify a list of cards.

    Expects JSON body with a 'cards' array of card objects.
    """
    data = request.get_json(silent=True)

    if not isinstance(data, dict) or 'cards' not in data:
        app.logger.warning("Batch classify: No cards provided in request")
        return jsonify({'error': 'No cards provided'}), 400

    cards = data['cards']

    if not isinstance(cards, list):
        app.logger.error(f"Batch classify: Cards is not a list, got {type(cards)}")
        return jsonify({'error': 'Cards must be an array'}), 400

    if len(cards) > app.config['MAX_BATCH_SIZE']:
        return jsonify({
            'error': f"At most {app.config['MAX_BATCH_SIZE']} cards per request"
        }), 400

    results = classify_records(engine, cards)

    plans = {}
    for item in results:
        plans[item['plan']] = plans.get(item['plan'], 0) + 1

    app.logger.info(f"Batch classify: Classified {len(results)} cards")

    return jsonify({
        'results': [{'plan': r['plan'], 'confidence': r['confidence']} for r in results],
        'summary': {'total': len(results), 'plans': plans},
    })


@app.route('/api/refresh', methods=['POST'])
def refresh():
    """Start a background reference data refresh."""
    start_background_refresh(engine.store, cache_dir=app.config['DATA_DIR'])
    app.logger.info("Reference refresh requested")
    return jsonify({'started': True}), 202


@app.route('/data/<path:filename>', methods=['GET'])
def reference_file(filename):
    """Serve cached reference CSVs."""
    return send_from_directory(app.config['DATA_DIR'], filename)


if app.config['REFRESH_ON_STARTUP']:
    start_reference_loading()


if __name__ == '__main__':
    port = int(os.environ.get('PORT', '3000'))
    # Debug mode is controlled by environment variable
    debug_mode = os.environ.get('FLASK_DEBUG', '0') == '1'

    app.logger.info(f"Plan Classifier API listening on {port}")
    app.run(debug=debug_mode, port=port, host='0.0.0.0')
