"""Tests for speedcore.isp -- operator lookup and directory records."""

import unittest

from speedcore.isp import (
    CERNET,
    DEFISP,
    MOBILE,
    TELECOM,
    UNICOM,
    GlobalServer,
    ISPInfo,
    ISPRegistry,
    default_registry,
    load_servers,
)
from speedcore.servers import ServerType


class TestRegistry(unittest.TestCase):
    def setUp(self):
        self.registry = default_registry()

    def test_exact_operator(self):
        self.assertIs(self.registry.resolve("联通"), UNICOM)
        self.assertIs(self.registry.resolve("教育网"), CERNET)

    def test_name_suffix(self):
        self.assertIs(self.registry.resolve("", "上海移动"), MOBILE)

    def test_exact_wins_over_suffix(self):
        self.assertIs(self.registry.resolve("电信", "北京联通"), TELECOM)

    def test_unknown_is_default(self):
        self.assertIs(self.registry.resolve("其他", "某地节点"), DEFISP)

    def test_longest_suffix_wins(self):
        short = ISPInfo(10, "网", "Short")
        long = ISPInfo(11, "广电网", "Long")
        registry = ISPRegistry(known=(), suffixes=(short, long))
        self.assertIs(registry.resolve("", "成都广电网"), long)
        self.assertIs(registry.resolve("", "成都城域网"), short)

    def test_by_id(self):
        self.assertIs(self.registry.by_id(3), MOBILE)
        self.assertIsNone(self.registry.by_id(99))

    def test_known_is_read_only(self):
        with self.assertRaises(TypeError):
            self.registry._known["x"] = DEFISP


class TestGlobalServer(unittest.TestCase):
    RAW = {
        "hostid": 42,
        "hostname": "Shanghai Telecom",
        "hostip": "10.1.2.3",
        "port": "8080",
        "pname": "Shanghai",
        "city": "Shanghai",
        "location": "31.2,121.4",
        "oper": "电信",
    }

    def test_from_dict(self):
        gs = GlobalServer.from_dict(self.RAW)
        self.assertEqual(gs.id, 42)
        self.assertEqual(gs.ip, "10.1.2.3")
        self.assertEqual(gs.port, "8080")
        self.assertEqual(gs.loc, "31.2,121.4")

    def test_to_server(self):
        server = GlobalServer.from_dict(self.RAW).to_server(default_registry())
        self.assertEqual(server.id, "42")
        self.assertEqual(server.host, "10.1.2.3")
        self.assertEqual(server.port, 8080)
        self.assertEqual(server.isp, TELECOM.id)
        self.assertEqual(server.type, ServerType.GLOBAL_SPEED)
        self.assertEqual(server.download_url, "http://10.1.2.3:8080/speed/File(1G).dl")

    def test_missing_port_defaults(self):
        raw = dict(self.RAW, port="")
        self.assertEqual(GlobalServer.from_dict(raw).to_server(default_registry()).port, 80)


class TestLoadServers(unittest.TestCase):
    def test_mixed_entries(self):
        entries = [
            TestGlobalServer.RAW,
            {"id": "7", "host": "perc.example", "port": 80, "type": 1, "isp": 2},
        ]
        servers = load_servers(entries, default_registry())
        self.assertEqual([s.id for s in servers], ["42", "7"])
        self.assertEqual(servers[1].type, ServerType.PERCEPTION)
        self.assertEqual(servers[1].isp, 2)


if __name__ == "__main__":
    unittest.main()
