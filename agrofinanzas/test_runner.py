"""Test runner used by ``manage.py test``."""

import logging

from django.test.runner import DiscoverRunner


class NonInteractiveDiscoverRunner(DiscoverRunner):
    """Never prompt before clobbering the test database and keep import logs quiet."""

    quiet_loggers = ("finanzas",)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.interactive = False

    def setup_test_environment(self, **kwargs):
        super().setup_test_environment(**kwargs)
        for name in self.quiet_loggers:
            logging.getLogger(name).setLevel(logging.WARNING)
