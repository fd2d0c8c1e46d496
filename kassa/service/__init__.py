"""Long-running front-ends: the HTTP receipt parser and the Telegram bot."""
