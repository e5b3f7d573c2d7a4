"""
API Routes
Provides RESTful endpoints for ITURHFProp predictions and engine health.
"""

import logging
from datetime import datetime

import pytz
from flask import Blueprint, jsonify, current_app, request

from prediction.constants import DEBUG_INPUT_LIMIT, ENGINE_NAME, MODEL_NAME
from prediction.errors import InvalidRequest, PredictionError
from prediction.health import check_engine_health, collect_diagnostics
from prediction.request_validator import parse_prediction_request
from utils.serialization import safe_json_serialize

api_bp = Blueprint('api', __name__)
logger = logging.getLogger(__name__)


def _service():
    return current_app.config.get('PREDICTION_SERVICE')


def _cache():
    return current_app.config.get('PREDICTION_CACHE')


def _cached(key):
    cache = _cache()
    return cache.get(key) if cache is not None else None


def _store(key, body):
    cache = _cache()
    if cache is not None:
        cache.set(key, body)


def _failure(error: PredictionError):
    return jsonify(safe_json_serialize(error.to_dict())), error.status_code


@api_bp.route('/predict', methods=['GET'])
def predict():
    """Single point prediction."""
    try:
        service = _service()
        if not service:
            return jsonify({'error': 'Prediction service not available'}), 503

        prediction_request = parse_prediction_request(request.args)

        cache_key = f"predict:{prediction_request.cache_key()}"
        cached = _cached(cache_key)
        if cached:
            logger.debug("Returning cached prediction")
            return jsonify(cached)

        result = service.predict(prediction_request)
        body = safe_json_serialize({
            'model': MODEL_NAME,
            'engine': ENGINE_NAME,
            **result.to_dict()
        })

        # Tolerated non-zero exits are rerun on the next request
        if result.error is None and result.engine_clean:
            _store(cache_key, body)
        return jsonify(body)

    except InvalidRequest as e:
        return _failure(e)
    except PredictionError as e:
        logger.error(f"Prediction failed: {e.message}")
        return _failure(e)
    except Exception as e:
        logger.error(f"Error running prediction: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/predict/hourly', methods=['GET'])
def predict_hourly():
    """24-hour prediction, one engine run per UTC hour."""
    try:
        service = _service()
        if not service:
            return jsonify({'error': 'Prediction service not available'}), 503

        base_request = parse_prediction_request(request.args, include_hour=False)
        batch = service.predict_hourly(base_request)

        return jsonify(safe_json_serialize({
            'model': MODEL_NAME,
            'engine': ENGINE_NAME,
            **batch.to_dict()
        }))

    except InvalidRequest as e:
        return _failure(e)
    except PredictionError as e:
        logger.error(f"Hourly prediction failed: {e.message}")
        return _failure(e)
    except Exception as e:
        logger.error(f"Error running hourly prediction: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/bands', methods=['GET'])
def band_conditions():
    """Band conditions keyed by band name."""
    try:
        service = _service()
        if not service:
            return jsonify({'error': 'Prediction service not available'}), 503

        args = request.args.to_dict()
        # Bands always probe the band table for the current year
        args.pop('frequencies', None)
        args.pop('year', None)
        prediction_request = parse_prediction_request(args)

        cache_key = f"bands:{prediction_request.cache_key()}"
        cached = _cached(cache_key)
        if cached:
            logger.debug("Returning cached band conditions")
            return jsonify(cached)

        band_result = service.predict_bands(prediction_request)
        prediction = band_result.prediction

        body = safe_json_serialize({
            'model': MODEL_NAME,
            'muf': band_result.muf,
            'bands': band_result.to_dict(),
            'error': prediction.error,
            'debug': {
                'rawOutput': prediction.raw,
                'freqCount': len(prediction.frequencies),
                'parsedFreqs': [line.to_dict() for line in prediction.frequencies],
                'execStdout': prediction.exec_stdout,
                'execStderr': prediction.exec_stderr,
                'exitCode': prediction.exit_code,
                'inputContent': prediction.input_content[:DEBUG_INPUT_LIMIT]
            },
            'timestamp': datetime.now(pytz.utc).isoformat()
        })

        if prediction.error is None and prediction.engine_clean:
            _store(cache_key, body)
        return jsonify(body)

    except InvalidRequest as e:
        return _failure(e)
    except PredictionError as e:
        logger.error(f"Band prediction failed: {e.message}")
        return _failure(e)
    except Exception as e:
        logger.error(f"Error getting band conditions: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/health', methods=['GET'])
def health():
    """Engine installation health check."""
    try:
        return jsonify(check_engine_health(current_app.config['SERVICE_CONFIG']))
    except Exception as e:
        logger.error(f"Error checking health: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/diag', methods=['GET'])
def diagnostics():
    """Detailed engine diagnostics including a canned test run."""
    try:
        return jsonify(safe_json_serialize(
            collect_diagnostics(current_app.config['SERVICE_CONFIG'], _service())
        ))
    except Exception as e:
        logger.error(f"Error collecting diagnostics: {e}")
        return jsonify({'error': 'Internal server error'}), 500
