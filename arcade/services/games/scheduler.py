import time


class BackgroundScheduler:
    """Run deferred room transitions on Socket.IO background tasks.

    - Runs the job inline in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Each job sleeps for its delay, then calls the target once; no cancellation,
      the target is expected to detect that it went stale
    """

    def __init__(self, app, socketio):
        self.app = app
        self.socketio = socketio

    def _inline(self) -> bool:
        return bool(self.app.config.get('TESTING')) and not self.app.config.get('ENABLE_SCHEDULER_IN_TESTS')

    def schedule(self, delay: float, fn, *args) -> None:
        self.app.logger.debug(f"[timer-set] target={getattr(fn, '__name__', fn)} args={args} delay={delay}s")
        if self._inline():
            fn(*args)
            return

        def _worker():
            self.socketio.sleep(delay)
            self.app.logger.debug(f"[timer-fire] target={getattr(fn, '__name__', fn)} args={args}")
            try:
                fn(*args)
            except Exception:
                self.app.logger.exception(f"[timer-error] target={getattr(fn, '__name__', fn)} args={args}")

        self.socketio.start_background_task(_worker)


def start_idle_sweeper(app, socketio, sessions) -> None:
    """Periodically close rooms nobody has touched for ROOM_IDLE_TIMEOUT_SEC."""
    max_idle = int(app.config.get('ROOM_IDLE_TIMEOUT_SEC', 0))
    if max_idle <= 0:
        return
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return
    interval = max(1, int(app.config.get('ROOM_SWEEP_INTERVAL_SEC', 30)))

    def _worker():
        while True:
            socketio.sleep(interval)
            try:
                closed = sessions.close_idle_rooms(max_idle, now=time.time())
            except Exception:
                app.logger.exception("[sweep-error] idle room sweep failed")
                continue
            if closed:
                app.logger.info(f"[sweep] closed={len(closed)} pins={closed}")

    app.logger.info(f"[sweep-start] max_idle={max_idle}s interval={interval}s")
    socketio.start_background_task(_worker)
