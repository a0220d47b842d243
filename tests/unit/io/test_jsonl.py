"""Unit tests for JSON-lines encoding, writing and reading."""

from __future__ import annotations

import asyncio
import io
import json
import threading

import pytest

from nexus.adapter.core import ProtocolError
from nexus.adapter.io import (
    JSONLWriter,
    decode_json_line,
    encode_record,
    iter_lines,
    read_lines,
)
from nexus.adapter.models import AdapterAccount, AdapterStreamStatus


class TestEncodeRecord:
    def test_wire_model_uses_aliases_and_drops_none(self):
        status = AdapterStreamStatus.message_created("m1")
        assert encode_record(status) == '{"type":"message_created","messageId":"m1"}'

    def test_mapping(self):
        assert encode_record({"a": 1, "b": "é"}) == '{"a":1,"b":"é"}'

    def test_list_of_models(self):
        accounts = [AdapterAccount(id="a"), AdapterAccount(id="b", display_name="B")]
        assert json.loads(encode_record(accounts)) == [
            {"id": "a", "status": "ready"},
            {"id": "b", "display_name": "B", "status": "ready"},
        ]


class TestDecodeJsonLine:
    def test_object(self):
        assert decode_json_line('{"type": "token"}') == {"type": "token"}

    @pytest.mark.parametrize("line", ["{", "[]", '"text"', "3"])
    def test_rejects_non_objects(self, line):
        with pytest.raises(ProtocolError):
            decode_json_line(line)


class TestJSONLWriter:
    """Test JSONLWriter."""

    def test_writes_one_line_per_record(self):
        buffer = io.StringIO()
        writer = JSONLWriter(buffer)

        writer.write({"n": 1})
        writer.write(AdapterStreamStatus.delivery_error("boom"))

        assert buffer.getvalue().splitlines() == [
            '{"n":1}',
            '{"type":"delivery_error","error":"boom"}',
        ]
        assert writer.records_written == 2

    def test_concurrent_writers_do_not_interleave(self):
        buffer = io.StringIO()
        writer = JSONLWriter(buffer)

        def emit(worker: int) -> None:
            for i in range(50):
                writer.write({"worker": worker, "i": i, "pad": "x" * 200})

        threads = [threading.Thread(target=emit, args=(w,)) for w in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        lines = buffer.getvalue().splitlines()
        assert len(lines) == 200
        assert all(json.loads(line)["pad"] == "x" * 200 for line in lines)

    @pytest.mark.asyncio
    async def test_publish_is_write(self):
        buffer = io.StringIO()
        writer = JSONLWriter(buffer)

        await writer.publish({"ok": True})
        await writer.close()

        assert buffer.getvalue() == '{"ok":true}\n'


class TestReadLines:
    @pytest.mark.asyncio
    async def test_reads_until_eof_and_strips_newlines(self):
        source = io.StringIO('{"a":1}\r\n\nlast')

        lines = [line async for line in read_lines(source)]

        assert lines == ['{"a":1}', "", "last"]

    @pytest.mark.asyncio
    async def test_empty_stream(self):
        lines = await asyncio.wait_for(
            _collect(read_lines(io.StringIO(""))), timeout=1.0
        )
        assert lines == []

    @pytest.mark.asyncio
    async def test_iter_lines(self):
        assert [line async for line in iter_lines(["a\n", "b"])] == ["a", "b"]


async def _collect(lines):
    return [line async for line in lines]
