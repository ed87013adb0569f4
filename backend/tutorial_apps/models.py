from tutorial_apps import db
import time


def current_time_milli():
    return int(time.time() * 1000)


class SleepNight(db.Model):
    __tablename__ = 'daily_sleep_quality_table'
    night_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    start_time_milli = db.Column(db.BigInteger, nullable=False, default=current_time_milli)
    # An open night has end == start until tracking stops
    end_time_milli = db.Column(db.BigInteger, nullable=False)
    sleep_quality = db.Column(db.Integer, nullable=False, default=-1)

    def __init__(self, **kwargs):
        super(SleepNight, self).__init__(**kwargs)
        if self.start_time_milli is None:
            self.start_time_milli = current_time_milli()
        if self.end_time_milli is None:
            self.end_time_milli = self.start_time_milli
        if self.sleep_quality is None:
            self.sleep_quality = -1

    def to_dict(self):
        return {
            'night_id': self.night_id,
            'start_time_milli': self.start_time_milli,
            'end_time_milli': self.end_time_milli,
            'sleep_quality': self.sleep_quality,
        }
