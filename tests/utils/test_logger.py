from __future__ import annotations

import logging

from statscard.utils.logger import REDACTED, redact_secrets, setup_logger


def test_redacts_bearer_tokens_and_query_tokens() -> None:
    message = "401 for https://api.github.com/x?access_token=plain-secret with Authorization: Bearer abc.def-123"

    cleaned = redact_secrets(message)

    assert "plain-secret" not in cleaned
    assert "abc.def-123" not in cleaned
    assert cleaned.count(REDACTED) == 2


def test_redacts_github_token_prefixes() -> None:
    cleaned = redact_secrets(RuntimeError("token ghp_1234567890abcdef leaked, also github_pat_11ABC_xyz"))

    assert "1234567890abcdef" not in cleaned
    assert "11ABC_xyz" not in cleaned


def test_plain_messages_are_untouched() -> None:
    assert redact_secrets("connection reset by peer") == "connection reset by peer"


def test_setup_logger_is_idempotent_and_accepts_level_names() -> None:
    logger = setup_logger("statscard.tests.logger", "debug")
    again = setup_logger("statscard.tests.logger", "DEBUG")

    assert logger is again
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_setup_logger_falls_back_to_info_for_unknown_level() -> None:
    logger = setup_logger("statscard.tests.unknown_level", "chatty")

    assert logger.level == logging.INFO
