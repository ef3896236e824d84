from flask import Flask, request, jsonify
from flask_cors import CORS
from commission_engine import CommissionProcessor, load_pricing
import os
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ENVIRONMENT = os.environ.get("ENVIRONMENT", "dev")

app = Flask(__name__)

# Enable CORS for all routes (billing dashboard and webhook workers call the API)
CORS(app)

# Initialize the processor with a single pricing snapshot
processor = CommissionProcessor(load_pricing())


@app.route("/api", methods=["GET"])
def api_info():
    """API information endpoint"""
    return jsonify({
        "status": "ok",
        "message": "Eleva Commission Engine API",
        "version": "1.0",
        "environment": ENVIRONMENT,
        "endpoints": {
            "compute_commission": "/compute_commission [POST]",
            "validate_fee_change": "/validate_fee_change [POST]",
            "evaluate_eligibility": "/evaluate_eligibility [POST]",
            "health": "/health [GET]"
        }
    }), 200


@app.route("/health", methods=["GET"])
def health():
    """Health check for monitoring"""
    return jsonify({"status": "healthy", "environment": ENVIRONMENT}), 200


def _handle(operation, label):
    """Run an engine operation on the JSON body and map the outcome to a response."""
    try:
        input_data = request.get_json(force=True, silent=True)

        if not input_data:
            return jsonify({
                "error": "No input data provided",
                "status": "failed"
            }), 400

        logger.info(f"Processing {label}")
        result = operation(input_data)

        if result["status"] == "rejected":
            logger.info(f"{label} rejected: {result['error']['kind']}")
            return jsonify(result), 422

        logger.info(f"{label} processed successfully")
        return jsonify(result), 200

    except (ValueError, KeyError, TypeError) as e:
        # Malformed input (missing fields, unknown tier, negative amounts...)
        logger.error(f"Validation error: {str(e)}")
        return jsonify({
            "error": f"Validation error: {str(e)}",
            "status": "validation_failed"
        }), 400

    except Exception as e:
        logger.error(f"Processing error: {str(e)}", exc_info=True)
        return jsonify({
            "error": "An unexpected error occurred during processing",
            "status": "failed"
        }), 500


@app.route("/compute_commission", methods=["POST"])
def compute_commission():
    """Split a booking between platform, organization and expert"""
    return _handle(processor.compute_commission_from_dict, "commission")


@app.route("/validate_fee_change", methods=["POST"])
def validate_fee_change():
    """Check an organization's marketing fee change against all its experts"""
    return _handle(processor.validate_fee_change_from_dict, "fee change")


@app.route("/evaluate_eligibility", methods=["POST"])
def evaluate_eligibility():
    """Evaluate subscription plan eligibility and projected savings"""
    return _handle(processor.evaluate_eligibility_from_dict, "eligibility")


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, debug=False)
