"""Unit tests for ui.dashboard -- rendered result text."""

import io
import unittest
from unittest import mock

from rich.console import Console

from speedcore.latency import LatencyResult
from speedcore.sampler import ThroughputResult
from speedcore.servers import Server, ServerType
from ui import dashboard


class TestDashboard(unittest.TestCase):
    def setUp(self):
        self.buffer = io.StringIO()
        patcher = mock.patch.object(
            dashboard, "console", Console(file=self.buffer, width=120, color_system=None)
        )
        patcher.start()
        self.addCleanup(patcher.stop)
        self.server = Server(
            id="9", name="Hangzhou", host="10.0.0.9", port=8080,
            province="Zhejiang", city="Hangzhou", type=ServerType.PERCEPTION,
        )

    def test_server_panel(self):
        dashboard.print_server(self.server, "China Mobile")
        text = self.buffer.getvalue()
        self.assertIn("10.0.0.9:8080", text)
        self.assertIn("perception", text)
        self.assertIn("Zhejiang Hangzhou", text)
        self.assertIn("China Mobile", text)

    def test_latency_line(self):
        dashboard.print_latency(LatencyResult(ping_ms=12.5, jitter_ms=1.25, method="icmp"))
        text = self.buffer.getvalue()
        self.assertIn("12.5 ms", text)
        self.assertIn("Jitter: 1.25 ms (icmp)", text)

    def test_speed_in_bits(self):
        result = ThroughputResult("download", 93.4, 2_000_000, 10_000.0)
        dashboard.print_speed_result(result, use_bytes=False, mebi=False)
        text = self.buffer.getvalue()
        self.assertIn("Download:", text)
        self.assertIn("93.40 Mbps", text)
        self.assertIn("data used: 2.00 MB", text)

    def test_speed_in_bytes(self):
        result = ThroughputResult("upload", 8.0, 10_000_000, 10_000.0)
        dashboard.print_speed_result(result, use_bytes=True, mebi=False)
        self.assertIn("1.00 MB/s", self.buffer.getvalue())

    def test_final_table_skips_missing_directions(self):
        latency = LatencyResult(ping_ms=5.0, jitter_ms=0.5, method="http")
        dashboard.print_final_results(self.server, latency, None, None)
        text = self.buffer.getvalue()
        self.assertIn("Ping", text)
        self.assertNotIn("Download", text)
        self.assertNotIn("Upload", text)


if __name__ == "__main__":
    unittest.main()
