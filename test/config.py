"""
Host-facing Config tests.

Scope
- Declaring options through the bound builder and adjusting them later.
- parse() success flag, conf[key] lookups, program name detection.
- Rendered output: help screen, value table, diagnostic log.
- serialize() to nested JSON and flat CSV, and config(path) as the fallback
  config file.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured with a rich Console writing to io.StringIO, without
  colors and wide enough that nothing wraps.
"""
import io
import json
import os.path
import tempfile
import unittest
from unittest import TestCase

from rich.console import Console

from stratum import Config, DataType, ExportFormat, FaultCode, Severity


class ConfigTestCase(TestCase):

    def setUp(self):
        self._directory = tempfile.TemporaryDirectory()
        self.console = Console(file=io.StringIO(), width=200, color_system=None)
        self.conf = Config(colorful=False, console=self.console)
        self.conf.description("A simple example")
        self.conf.option("numOpt").shortflag("n").default(3.14).description("A number").build()
        self.conf.option("strOpt").shortflag("s").default("string").required(True).description("A string value").build()
        self.conf.option("part1.value1").shortflag("p1v1").default("p1v1").description("Nested value").build()
        self.conf.option("flag").shortflag("f").default(False).description("A switch").build()

    def tearDown(self):
        self._directory.cleanup()

    def path(self, name):
        return os.path.join(self._directory.name, name)

    @property
    def output(self):
        return self.console.file.getvalue()


class TestDeclaration(ConfigTestCase):

    def testRegistryOrder(self):
        self.assertEqual(list(self.conf.registry), ["numOpt", "strOpt", "part1.value1", "flag"])

    def testAdjustExisting(self):
        self.conf.option("strOpt").default("another string").build()
        self.assertEqual(self.conf.registry["strOpt"].default.as_text(), "another string")
        self.assertEqual(self.conf.registry["strOpt"].shortflag, "s")
        self.assertTrue(self.conf.registry["strOpt"].required)

    def testDescription(self):
        self.assertEqual(self.conf.description(), "A simple example")
        self.assertIs(self.conf.description("Changed"), self.conf)
        self.assertEqual(self.conf.description(), "Changed")


class TestParse(ConfigTestCase):

    def testLookupsBeforeParse(self):
        self.assertTrue(self.conf["numOpt"].empty)
        self.assertNotIn("numOpt", self.conf)
        self.assertIsNone(self.conf.resolution)
        with self.assertRaises(RuntimeError):
            self.conf.values

    def testParseDefaults(self):
        self.assertTrue(self.conf.parse(["demo"]))
        self.assertEqual(self.conf["numOpt"].as_number(), 3.14)
        self.assertEqual(self.conf["part1.value1"].as_text(), "p1v1")
        self.assertIn("flag", self.conf)
        self.assertTrue(self.conf["absent"].empty)

    def testParseCommandLine(self):
        self.assertTrue(self.conf.parse(["demo", "-n", "-2.5", "--flag", "-p1v1", "changed"]))
        self.assertEqual(self.conf["numOpt"].as_number(), -2.5)
        self.assertIs(self.conf["flag"].as_bool(), True)
        self.assertEqual(self.conf["part1.value1"].as_text(), "changed")

    def testNameFromArgv(self):
        self.conf.parse([os.path.join("usr", "bin", "demo-tool")])
        self.assertEqual(self.conf.name, "demo-tool")
        self.assertEqual(Config("fixed").name, "fixed")
        self.assertEqual(Config().name, "stratum")

    def testConfigFallbackPath(self):
        path = self.path("settings.json")
        with open(path, "w", encoding="utf-8") as stream:
            json.dump({"numOpt": 1.5, "part1": {"value1": "file"}}, stream)
        self.assertIs(self.conf.config(path), self.conf)
        self.assertTrue(self.conf.parse(["demo"]))
        self.assertEqual(self.conf["numOpt"].as_number(), 1.5)
        self.assertEqual(self.conf["part1.value1"].as_text(), "file")

    def testMissingFallbackFileFails(self):
        self.conf.config(self.path("absent.json"))
        self.assertFalse(self.conf.parse(["demo"]))

    def testConfigAfterParseLoadsNow(self):
        self.assertTrue(self.conf.parse(["demo", "-s", "cli"]))
        path = self.path("saved.json")
        with open(path, "w", encoding="utf-8") as stream:
            json.dump({"numOpt": 7.5, "strOpt": "file"}, stream)
        self.conf.config(path)
        self.assertTrue(self.conf.resolution.success)
        self.assertEqual(self.conf["numOpt"].as_number(), 7.5)
        self.assertEqual(self.conf["strOpt"].as_text(), "cli")

    def testConfigAfterParseReportsUnreadableFile(self):
        self.assertTrue(self.conf.parse(["demo"]))
        self.conf.config(self.path("absent.json"))
        self.assertFalse(self.conf.resolution.success)

    def testFallbackPathWithConfigOptionDisabled(self):
        path = self.path("settings.json")
        with open(path, "w", encoding="utf-8") as stream:
            json.dump({"numOpt": 1.5}, stream)
        conf = Config("demo", config=False, colorful=False, console=self.console)
        conf.option("numOpt").shortflag("n").default(3.14).description("A number").build()
        conf.config(path)
        self.assertTrue(conf.parse(["demo"]))
        self.assertEqual(conf["numOpt"].as_number(), 1.5)

    def testLogLevel(self):
        self.assertIs(self.conf.log(Severity.SILENT), self.conf)
        self.conf.config(self.path("absent.json"))
        self.assertTrue(self.conf.parse(["demo"]))
        self.assertEqual(len(self.conf.resolution.log), 0)


class TestOutput(ConfigTestCase):

    def testHelp(self):
        self.assertTrue(self.conf.parse(["demo", "--help"]))
        self.assertTrue(self.conf.resolution.help_requested)
        output = self.output
        self.assertIn("usage: demo", output)
        self.assertIn("A simple example", output)
        self.assertIn("-n, --numOpt", output)
        self.assertIn("-p1v1, --part1.value1", output)
        self.assertIn("default: 3.140000", output)
        self.assertIn("(required)", output)
        self.assertNotIn("--help", output)
        self.assertNotIn("--config", output)

    def testNoHelpWithoutFlag(self):
        self.conf.parse(["demo"])
        self.assertEqual(self.output, "")

    def testPrint(self):
        self.conf.parse(["demo", "-s", "cli", "--extra", "7"])
        self.conf.print()
        output = self.output
        self.assertIn('"cli"', output)
        self.assertIn("command-line", output)
        self.assertIn("default", output)
        self.assertIn("extra (undeclared)", output)

    def testLog(self):
        self.conf.parse(["demo", "--zzz", "1", "-q"])
        self.conf.log()
        output = self.output
        self.assertIn("--zzz: unknown option; a following value is kept as text", output)
        self.assertIn("-q: unknown shortflag; ignored", output)
        self.assertIn("22102", output)

    def testLogBeforeParseIsQuiet(self):
        self.conf.log()
        self.assertEqual(self.output, "")


class TestSerialize(ConfigTestCase):

    def testJsonIsNested(self):
        self.conf.parse(["demo", "--flag"])
        path = self.path("out.json")
        self.conf.serialize(path)
        with open(path, encoding="utf-8") as stream:
            self.assertEqual(json.load(stream), {
                "numOpt": 3.14,
                "strOpt": "string",
                "part1": {"value1": "p1v1"},
                "flag": True,
            })

    def testCsvLines(self):
        self.conf.parse(["demo"])
        path = self.path("out.csv")
        self.conf.serialize(path)
        with open(path, encoding="utf-8") as stream:
            self.assertEqual(stream.read().splitlines(), [
                "numOpt,3.140000",
                'strOpt,"string"',
                'part1.value1,"p1v1"',
                "flag,false",
            ])

    def testExplicitFormat(self):
        self.conf.parse(["demo"])
        path = self.path("out.txt")
        self.conf.serialize(path, ExportFormat.CSV)
        with open(path, encoding="utf-8") as stream:
            self.assertTrue(stream.read().startswith("numOpt,"))

    def testRoundTripThroughConfigFile(self):
        self.conf.parse(["demo", "-n", "9", "-s", "saved"])
        path = self.path("saved.json")
        self.conf.serialize(path)

        other = Config(colorful=False, console=self.console)
        other.option("numOpt").shortflag("n").default(0.0).description("A number").build()
        other.option("strOpt").shortflag("s").default("").description("A string value").build()
        self.assertTrue(other.parse(["demo", path]))
        self.assertIs(other["numOpt"].type, DataType.NUMBER)
        self.assertEqual(other["numOpt"].as_number(), 9.0)
        self.assertEqual(other["strOpt"].as_text(), "saved")

    def testConflictingStrayLeftOutOfJson(self):
        conf = Config("demo", colorful=False, console=self.console)
        conf.option("a").shortflag("a").default(1.0).description("A number").build()
        self.assertTrue(conf.parse(["demo", "--a.b", "1", "--other", "x"]))
        path = self.path("out.json")
        conf.serialize(path)
        with open(path, encoding="utf-8") as stream:
            self.assertEqual(json.load(stream), {"a": 1.0, "other": "x"})
        conflicts = [record for record in conf.resolution.log if record.code is FaultCode.EXPORT_CONFLICT]
        self.assertEqual([record.subject for record in conflicts], ["a.b"])

    def testConflictingStrayKeptInCsv(self):
        conf = Config("demo", colorful=False, console=self.console)
        conf.option("a").shortflag("a").default(1.0).description("A number").build()
        conf.parse(["demo", "--a.b", "1"])
        path = self.path("out.csv")
        conf.serialize(path)
        with open(path, encoding="utf-8") as stream:
            self.assertEqual(stream.read().splitlines(), ["a,1.000000", 'a.b,"1"'])

    def testSerializeBeforeParse(self):
        with self.assertRaises(RuntimeError):
            self.conf.serialize(self.path("out.json"))


if __name__ == "__main__":
    unittest.main()
