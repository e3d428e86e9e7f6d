# main_app.py
import logging
import sys

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix
from flask_cors import CORS

import config
from routes.tts import tts_bp
from services.azure_speech import AzureSpeechClient
from services.synthesis_gateway import SynthesisGateway
from voice_catalog import VoiceCatalog

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def configure_logging(log_file=None, level="INFO"):
    """日志同时写入文件和 stderr"""
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))  # 防止中文乱码

    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )


def load_catalog(catalog_file=None, fallback_voice=None):
    """声音目录只在启动时加载一次"""
    fallback = fallback_voice or config.FALLBACK_VOICE
    if catalog_file:
        return VoiceCatalog.from_file(catalog_file, fallback_voice=fallback)
    return VoiceCatalog.default(fallback_voice=fallback)


def create_app(test_config=None, gateway=None):
    """
    Build the Flask app.

    Args:
        test_config: dict overriding values from config.py
        gateway: pre-built SynthesisGateway (tests); otherwise built from config

    Raises:
        ConfigurationError: Azure key/region missing and no gateway given
    """
    app = Flask(__name__)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)
    app.config.from_object(config)
    if test_config:
        app.config.update(test_config)
    app.secret_key = app.config['FLASK_SECRET_KEY']

    if gateway is None:
        catalog = load_catalog(app.config.get('VOICE_CATALOG_FILE'), app.config.get('FALLBACK_VOICE'))
        speech_client = AzureSpeechClient(
            subscription_key=app.config.get('AZURE_SPEECH_KEY'),
            region=app.config.get('AZURE_SPEECH_REGION'),
            output_format=app.config.get('AZURE_SPEECH_OUTPUT_FORMAT'),
            timeout=app.config.get('AZURE_SPEECH_TIMEOUT'),
        )
        gateway = SynthesisGateway(catalog, speech_client)

    app.extensions['voice_catalog'] = gateway.catalog
    app.extensions['synthesis_gateway'] = gateway

    # 允许跨域 (React 端口通常是 3000)，并暴露自定义 header
    CORS(app, resources={
        r"/api/*": {
            "origins": app.config.get('ALLOWED_ORIGINS', config.ALLOWED_ORIGINS),
            "expose_headers": ["X-Pinyin", "X-Voice-Name"],
        }
    })

    app.register_blueprint(tts_bp)

    return app


# 运行应用
if __name__ == '__main__':
    configure_logging(config.LOG_FILE, config.LOG_LEVEL)
    app = create_app()
    logging.info("应用正在启动: http://127.0.0.1:5000")

    app.run('0.0.0.0', 5000, debug=True)
