from functools import wraps

from flask import has_app_context
from sqlalchemy.exc import SQLAlchemyError

from tutorial_apps.errors import StorageError
from tutorial_apps.models import SleepNight


_UPDATABLE_FIELDS = {'start_time_milli', 'end_time_milli', 'sleep_quality'}


def _storage_call(operation):
    """Run the wrapped call inside an app context and translate database
    failures into StorageError after rolling the session back."""

    def decorator(fn):
        @wraps(fn)
        def wrapper(self, *args, **kwargs):
            if has_app_context():
                return self._guarded(operation, fn, *args, **kwargs)
            with self._app.app_context():
                return self._guarded(operation, fn, *args, **kwargs)
        return wrapper

    return decorator


class SleepNightRepository:
    """Key-ordered store of sleep nights.

    Constructed with the Flask app and the SQLAlchemy handle that own the
    connection; methods may be called from worker threads. Records come back
    as plain dicts so they stay valid after the session closes.
    """

    def __init__(self, app, db):
        self._app = app
        self._db = db

    def _guarded(self, operation, fn, *args, **kwargs):
        try:
            return fn(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            self._db.session.rollback()
            raise StorageError(operation, exc) from exc

    @_storage_call('insert')
    def insert(self, **fields):
        night = SleepNight(**fields)
        self._db.session.add(night)
        self._db.session.commit()
        return night.to_dict()

    @_storage_call('update')
    def update(self, night_id, **fields):
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown sleep night fields: {sorted(unknown)}")
        night = self._db.session.get(SleepNight, night_id)
        if night is None:
            return None
        for key, value in fields.items():
            setattr(night, key, value)
        self._db.session.add(night)
        self._db.session.commit()
        return night.to_dict()

    @_storage_call('get')
    def get(self, night_id):
        night = self._db.session.get(SleepNight, night_id)
        return night.to_dict() if night else None

    @_storage_call('get_tonight')
    def get_tonight(self):
        night = SleepNight.query.order_by(SleepNight.night_id.desc()).first()
        return night.to_dict() if night else None

    @_storage_call('get_all_nights')
    def get_all_nights(self):
        return [n.to_dict() for n in SleepNight.query.order_by(SleepNight.night_id.desc()).all()]

    @_storage_call('clear')
    def clear(self):
        deleted = SleepNight.query.delete()
        self._db.session.commit()
        return deleted
