from chatroom.net.buffer import Buffer, Separator


def test_length_prefix_wire_format():
    buf = Buffer(Separator.LENGTH_PREFIX)
    buf.append_with_head(b"abc")
    assert buf.data() == b"\x00\x00\x00\x03abc"


def test_length_prefix_round_trip_of_two_messages():
    buf = Buffer(Separator.LENGTH_PREFIX)
    buf.append_with_head(b"hello")
    buf.append_with_head(b"world!")
    assert buf.get_message() == b"hello"
    assert buf.get_message() == b"world!"
    assert buf.get_message() is None
    assert len(buf) == 0


def test_length_prefix_incomplete_message_waits():
    whole = Buffer(Separator.LENGTH_PREFIX)
    whole.append_with_head(b"payload")
    wire = whole.data()

    buf = Buffer(Separator.LENGTH_PREFIX)
    buf.append(wire[:-2])
    assert buf.get_message() is None
    assert len(buf) == len(wire) - 2
    buf.append(wire[-2:])
    assert buf.get_message() == b"payload"


def test_length_prefix_short_header_waits():
    buf = Buffer(Separator.LENGTH_PREFIX)
    buf.append(b"\x00\x00")
    assert buf.get_message() is None


def test_none_separator_returns_everything():
    buf = Buffer(Separator.NONE)
    buf.append_with_head(b"abc")
    buf.append(b"def")
    assert buf.get_message() == b"abcdef"
    assert len(buf) == 0


def test_crlf_is_default_and_returns_everything():
    buf = Buffer()
    assert buf.separator is Separator.CRLF
    buf.append(b"GET / HTTP/1.1\r\n\r\n")
    assert buf.get_message() == b"GET / HTTP/1.1\r\n\r\n"
    assert buf.get_message() is None


def test_crlf_append_with_head_writes_nothing():
    buf = Buffer(Separator.CRLF)
    buf.append_with_head(b"abc")
    assert len(buf) == 0


def test_empty_buffer_has_no_message():
    assert Buffer(Separator.NONE).get_message() is None


def test_erase_and_clear():
    buf = Buffer()
    buf.append(b"0123456789")
    buf.erase(0, 4)
    assert buf.data() == b"456789"
    buf.erase(2, 2)
    assert buf.data() == b"4589"
    buf.clear()
    assert buf.data() == b""