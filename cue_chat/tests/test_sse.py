from cue_chat.providers.sse import SseDecoder, extract_delta, parse_payload


def test_event_split_across_chunks():
    decoder = SseDecoder()
    assert decoder.feed(b'data: {"choices":[{"delta":') == []
    assert decoder.pending.startswith("data:")
    payloads = decoder.feed(b'{"content":"Hi"}}]}\n\n')
    assert payloads == ['{"choices":[{"delta":{"content":"Hi"}}]}']
    assert decoder.pending == ""


def test_multiple_events_in_one_chunk_keep_order():
    decoder = SseDecoder()
    payloads = decoder.feed("data: one\n\ndata: two\n\ndata: thr")
    assert payloads == ["one", "two"]
    assert decoder.feed("ee\n\n") == ["three"]


def test_only_data_lines_matter():
    decoder = SseDecoder()
    payloads = decoder.feed("event: message\nid: 7\n: comment\ndata:  padded  \n\n")
    assert payloads == ["padded"]


def test_crlf_framing_is_accepted():
    decoder = SseDecoder()
    assert decoder.feed(b"data: a\r\n\r\ndata: b\r\n\r\n") == ["a", "b"]


def test_multibyte_character_split_between_chunks():
    raw = 'data: {"choices":[{"delta":{"content":"été"}}]}\n\n'.encode("utf-8")
    cut = raw.index(b"\xc3") + 1
    decoder = SseDecoder()
    payloads = decoder.feed(raw[:cut]) + decoder.feed(raw[cut:])
    assert extract_delta(payloads[0]) == "été"


def test_iter_feed_flattens_chunks():
    decoder = SseDecoder()
    assert list(decoder.iter_feed(["data: x\n", "\ndata: y\n\n"])) == ["x", "y"]


def test_parse_payload_variants():
    assert parse_payload("[DONE]") == (None, True)
    assert parse_payload("") == (None, False)
    assert parse_payload("{broken") == (None, False)
    assert parse_payload('{"choices": []}') == (None, False)
    assert parse_payload('{"choices":[{"delta":{"role":"assistant"}}]}') == (None, False)
    assert parse_payload('{"choices":[{"delta":{"content":"x"},"finish_reason":"stop"}]}') == ("x", True)
    assert parse_payload('["not", "an", "object"]') == (None, False)


def test_flush_parses_last_block_without_blank_line():
    decoder = SseDecoder()
    assert decoder.feed(b"data: a\n\ndata: [DONE]\n") == ["a"]
    assert decoder.flush() == ["[DONE]"]
    assert decoder.pending == ""
    assert decoder.flush() == []


def test_flush_completes_split_utf8_sequence():
    decoder = SseDecoder()
    encoded = "data: café".encode("utf-8")
    assert decoder.feed(encoded[:-1]) == []
    assert decoder.flush() == ["café"]
