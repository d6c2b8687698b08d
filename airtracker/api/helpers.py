"""Shared helpers for the API blueprints."""

from datetime import datetime, timezone

from flask import current_app, jsonify

from airtracker.services.tracker import TrackerService


def get_service() -> TrackerService:
    """The TrackerService registered by create_app()."""
    return current_app.config['TRACKER_SERVICE']


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def success(data: dict, status: int = 200):
    """Standard success envelope."""
    return jsonify({'success': True, 'data': data}), status


def error(title: str, message: str, status: int):
    """Standard error envelope."""
    return jsonify({'success': False, 'error': title, 'message': message}), status
