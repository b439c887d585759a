"""Flask stats endpoints for a running log truck."""

from typing import Callable

from flask import Flask, jsonify


def create_dashboard_app(stats: Callable[[], dict]) -> Flask:
    app = Flask(__name__)

    @app.route("/")
    def summary():
        snap = stats()
        counters = snap["counters"]
        backlog = snap["queue_depth"]
        return jsonify(
            received=counters["received"],
            delivered=counters["delivered"],
            undelivered=counters["rejected"] + counters["failed"] + counters["dropped"],
            queue=f"{backlog}/{snap['queue_capacity']}",
            backpressure=backlog >= snap["queue_capacity"],
        )

    @app.route("/stats")
    def stats_view():
        return jsonify(stats())

    @app.route("/health")
    def health():
        return jsonify(status="ok")

    return app


def run_dashboard(app: Flask, port: int, host: str = "0.0.0.0"):
    """Serve the stats app; blocks, so run it on a daemon thread."""
    app.run(host=host, port=port, threaded=True, use_reloader=False)
