"""Public smoke tests for basic module wiring.

Keep these minimal and free of any real-world data.
"""

from __future__ import annotations


def test_imports() -> None:
    import kassa
    import kassa.application
    import kassa.cli.main
    import kassa.receipt
    import kassa.runtime
    import kassa.service.receipt_server
    import kassa.service.telegram_bot

    assert kassa.__version__
    assert kassa.cli.main is not None
    assert kassa.receipt is not None
    assert kassa.runtime is not None
    assert kassa.service.receipt_server.app is not None
    assert kassa.service.telegram_bot.build_application is not None
