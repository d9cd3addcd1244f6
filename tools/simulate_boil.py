import logging

from alerts.engine import BrewTimer
from alerts.lifecycle import AlertLifecycle
from alerts.ports import NotificationPermission, Notifier
from alerts.settings import Settings
from alerts.time_utils import format_hms


class PrintNotifier(Notifier):
    def notify(self, title: str, body: str) -> None:
        print(f"  notify: {title} / {body}")


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")
    lifecycle = AlertLifecycle(notifier=PrintNotifier(), permission=NotificationPermission.GRANTED)
    engine = BrewTimer(Settings(), lifecycle=lifecycle)
    engine.start(now=0.0)
    # Coarse 15 s ticks through a whole default boil.
    for step in range(0, engine.settings.total_seconds + 15, 15):
        result = engine.tick(now=float(step))
        for event in result.events:
            print(f"{format_hms(result.elapsed_seconds)} {event.kind.value:4s} {event.stage.label}")
    engine.reset()


if __name__ == "__main__":
    main()
