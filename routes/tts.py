# routes/tts.py
import logging
from urllib.parse import quote

from flask import Blueprint, Response, current_app, jsonify, request

from errors import SpeechProxyError, ValidationError

tts_bp = Blueprint('tts', __name__)

logger = logging.getLogger(__name__)

# 与 JavaScript encodeURIComponent 相同的保留字符
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_header_value(value):
    """Percent-encode like encodeURIComponent; None -> ''."""
    if not value:
        return ""
    return quote(value, safe=_URI_COMPONENT_SAFE)


@tts_bp.route('/api/azure/text-to-speech', methods=['POST'])
@tts_bp.route('/api/text-to-speech', methods=['POST'])
def tts_api():
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Text is required")

        gateway = current_app.extensions['synthesis_gateway']
        result = gateway.synthesize(data.get('text'), data.get('language'), data.get('voice'))

        # 直接返回音频 (audio/mpeg)，拼音放在 header 里
        return Response(
            result.audio,
            status=200,
            mimetype='audio/mpeg',
            headers={
                'X-Pinyin': encode_header_value(result.phonetic),
                'X-Voice-Name': result.voice or "",
            },
        )

    except ValidationError as e:
        return jsonify({'error': e.message}), 400

    except SpeechProxyError as e:
        logger.error(f"[TTS] {type(e).__name__}: {e.message}")
        return jsonify({'error': 'Internal Server Error'}), 500

    except Exception:
        logger.exception("[TTS] Unexpected error")
        return jsonify({'error': 'Internal Server Error'}), 500


@tts_bp.route('/api/azure/voices', methods=['GET'])
def list_voices():
    catalog = current_app.extensions['voice_catalog']
    return jsonify(catalog.to_dict())
