"""FastAPI webhook service and polling entry point for the bingo bot."""
