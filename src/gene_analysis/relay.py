"""Relay endpoint forwarding GET requests to upstream services.

Browser-style clients that cannot reach an upstream directly (CORS, blocked
networks) go through ``GET /relay?url=<encoded target>``. The relay injects
the NCBI API key for NCBI hosts and streams the upstream response back.
"""

import logging
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests
from flask import Flask, Response, jsonify, request, stream_with_context

from .config import Config

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


def _host_matches(host: str, suffix: str) -> bool:
    host = host.lower()
    suffix = suffix.lower().lstrip('.')
    return host == suffix or host.endswith('.' + suffix)


def inject_credential(target: str, credential_host: str, api_key: Optional[str]) -> str:
    """Add api_key to the query of targets on the credential host."""
    if not api_key:
        return target
    parts = urlsplit(target)
    if not _host_matches(parts.hostname or '', credential_host):
        return target

    query = parse_qsl(parts.query, keep_blank_values=True)
    if any(key == 'api_key' for key, _ in query):
        return target
    query.append(('api_key', api_key))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def create_app(config: Optional[Config] = None) -> Flask:
    """Build the relay WSGI app."""
    config = config or Config.default()
    relay_config = config.relay
    app = Flask(__name__)

    @app.after_request
    def add_relay_headers(response):
        response.headers['Access-Control-Allow-Origin'] = '*'
        response.headers['Cache-Control'] = relay_config.cache_control
        return response

    @app.route('/healthz')
    def healthz():
        return jsonify({'ok': True})

    @app.route('/relay')
    def relay():
        target = request.args.get('url')
        if not target:
            return jsonify({'error': 'Missing url param'}), 400

        parts = urlsplit(target)
        if parts.scheme not in ('http', 'https') or not parts.hostname:
            return jsonify({'error': 'Invalid url param'}), 400

        allowed = relay_config.allowed_hosts
        if allowed and not any(_host_matches(parts.hostname, host) for host in allowed):
            logger.warning(f"Refusing to relay to {parts.hostname}")
            return jsonify({'error': 'Host not allowed'}), 403

        upstream_url = inject_credential(target, relay_config.credential_host, config.api.ncbi_api_key)

        try:
            upstream = requests.get(upstream_url, stream=True, timeout=relay_config.timeout_seconds)
        except requests.RequestException as e:
            logger.error(f"Relay to {parts.hostname} failed: {e}")
            return jsonify({'error': 'Proxy failed', 'details': str(e)}), 500

        logger.info(f"Relayed {parts.hostname}{parts.path} -> {upstream.status_code}")

        def generate():
            try:
                for chunk in upstream.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        yield chunk
            finally:
                upstream.close()

        return Response(
            stream_with_context(generate()),
            status=upstream.status_code,
            content_type=upstream.headers.get('Content-Type', 'application/octet-stream')
        )

    return app
