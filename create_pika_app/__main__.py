"""Allow ``python -m create_pika_app``."""

from create_pika_app.cli import main

main()
