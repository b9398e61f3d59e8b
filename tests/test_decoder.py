from lingochat.client.decoder import SSEStreamDecoder

STREAM = (
    'data: {"text":"Hi"}\n\n'
    'data: {"text":" ఎలా"}\n\n'
    ": ping\n\n"
    'data: {"text":" there"}\n\n'
    'event: done\ndata: {"chatName":"Greetings"}\n\n'
).encode("utf-8")


def decode(reads):
    tokens = []
    decoder = SSEStreamDecoder(tokens.append)
    for data in reads:
        decoder.feed(data)
    return tokens, decoder.close()


def test_frame_split_across_three_reads():
    tokens, outcome = decode([b'data: {"te', b'xt":"Hi"}', b"\n\n"])

    assert tokens == ["Hi"]
    assert outcome.tokens == 1
    assert outcome.done is False
    assert outcome.chat_name is None


def test_single_read_with_many_frames():
    tokens, outcome = decode([STREAM])

    assert tokens == ["Hi", " ఎలా", " there"]
    assert outcome.done is True
    assert outcome.chat_name == "Greetings"


def test_every_split_offset_gives_same_result():
    expected_tokens, expected = decode([STREAM])

    for offset in range(len(STREAM) + 1):
        tokens, outcome = decode([STREAM[:offset], STREAM[offset:]])
        assert tokens == expected_tokens, offset
        assert outcome.chat_name == expected.chat_name, offset


def test_byte_at_a_time():
    tokens, outcome = decode([bytes([b]) for b in STREAM])

    assert tokens == ["Hi", " ఎలా", " there"]
    assert outcome.chat_name == "Greetings"


def test_end_without_terminal_frame_resolves_without_title():
    tokens, outcome = decode([b'data: {"text":"partial"}\n\ndata: {"text":"cut'])

    assert tokens == ["partial"]
    assert outcome.done is False
    assert outcome.chat_name is None


def test_malformed_frame_is_skipped():
    tokens, outcome = decode([b'data: {"text":"a"}\n\ndata: {not json\n\ndata: {"text":"b"}\n\n'])

    assert tokens == ["a", "b"]
    assert outcome.tokens == 2


def test_title_not_overwritten_after_terminal_frame():
    tokens, outcome = decode(
        [
            b'event: done\ndata: {"chatName":"First"}\n\n',
            b'event: done\ndata: {"chatName":"Second"}\n\ndata: {"text":"late"}\n\n',
        ]
    )

    assert tokens == []
    assert outcome.chat_name == "First"


def test_null_chat_name():
    _, outcome = decode([b'event: done\ndata: {"chatName":null}\n\n'])

    assert outcome.done is True
    assert outcome.chat_name is None


def test_error_frame_is_reported():
    errors = []
    tokens = []
    decoder = SSEStreamDecoder(tokens.append, errors.append)
    decoder.feed(b'data: {"text":"one"}\n\ndata: {"text":"two"}\n\ndata: {"error":"model exploded"}\n\n')
    outcome = decoder.close()

    assert tokens == ["one", "two"]
    assert errors == ["model exploded"]
    assert outcome.error == "model exploded"
    assert outcome.chat_name is None
    assert outcome.done is False


def test_crlf_separators():
    tokens, outcome = decode([b'data: {"text":"x"}\r', b'\n\r\nevent: done\r\ndata: {"chatName":"T"}\r\n\r\n'])

    assert tokens == ["x"]
    assert outcome.chat_name == "T"


def test_tokens_not_deduplicated():
    tokens, _ = decode([b'data: {"text":"ha"}\n\ndata: {"text":"ha"}\n\n'])

    assert tokens == ["ha", "ha"]
