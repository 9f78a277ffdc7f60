from fritzlog.exceptions import ApiError, ConfigError, format_error_chain


def _raise_chain():
    try:
        try:
            raise OSError("connection refused")
        except OSError as err:
            raise ApiError("Receiving response failed") from err
    except ApiError as err:
        raise ConfigError("Startup failed") from err


def test_format_error_chain_walks_causes():
    try:
        _raise_chain()
    except ConfigError as err:
        text = format_error_chain(err)

    assert text.splitlines() == [
        "Error: Startup failed",
        "Caused by: Receiving response failed",
        "Caused by: connection refused",
    ]


def test_format_error_chain_single_error():
    assert format_error_chain(ApiError("boom")) == "Error: boom"


def test_format_error_chain_uses_type_name_for_empty_message():
    assert format_error_chain(ValueError()) == "Error: ValueError"
