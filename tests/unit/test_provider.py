import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from nvidia_monitor.errors import (
    MalformedUuidOutputError,
    ParseError,
    ProcessOutputError,
    ProviderError,
    UnknownMetricError,
)
from nvidia_monitor.gpu import METRIC_IDS, Provider, ProviderKind
from nvidia_monitor.gpu.metrics import METRICS
from tests.unit.fakes import FakeRunner

UUID = "GPU-abc123"


def smi_argv(key, program=("nvidia-smi",)):
    return list(program) + ["--query-gpu=" + key, "--format=csv,noheader", "-i", UUID]


def settings_argv(key):
    return ["nvidia-settings", f"-q=[gpu:{UUID}]/{key}", "-t"]


class MetricTableTests(unittest.TestCase):
    def test_every_supported_metric_has_a_wire_key(self):
        for kind in ProviderKind:
            provider = Provider(kind, FakeRunner())
            for metric_id in provider.supported_metrics():
                wire_key = provider.wire_key(metric_id)
                self.assertIn(wire_key, [p.processor_key for p in provider.properties])

    def test_one_property_per_metric(self):
        for kind in ProviderKind:
            ids = [p.metric_id for p in Provider(kind, FakeRunner()).properties]
            self.assertEqual(len(ids), len(set(ids)))

    def test_supported_metrics_per_kind(self):
        self.assertEqual(Provider(ProviderKind.SMI, FakeRunner()).supported_metrics(), METRIC_IDS)
        self.assertEqual(Provider(ProviderKind.OPTIMUS, FakeRunner()).supported_metrics(), METRIC_IDS)
        self.assertEqual(
            Provider(ProviderKind.SETTINGS_AND_SMI, FakeRunner()).supported_metrics(), METRIC_IDS
        )
        self.assertEqual(
            Provider(ProviderKind.SETTINGS, FakeRunner()).supported_metrics(),
            ("util", "mem_ctrl_util", "temp", "memory_usage", "memory_total"),
        )

    def test_combined_kind_prefers_nvidia_settings(self):
        provider = Provider(ProviderKind.SETTINGS_AND_SMI, FakeRunner())
        self.assertEqual(provider.wire_key("temp"), "GPUCoreTemp")
        self.assertEqual(provider.wire_key("util"), "GPUUtilization")
        self.assertEqual(provider.wire_key("power_usage"), "power.draw")
        self.assertEqual(provider.wire_key("name"), "gpu_name")

    def test_argv_shapes(self):
        runner = FakeRunner()
        for metric in METRICS:
            prop = Provider(ProviderKind.OPTIMUS, runner).property_for(metric.metric_id)
            self.assertEqual(
                prop.processor.build_argv(UUID, prop.processor_key),
                smi_argv(metric.smi_key, ("optirun", "nvidia-smi")),
            )
        prop = Provider(ProviderKind.SETTINGS, runner).property_for("memory_total")
        self.assertEqual(
            prop.processor.build_argv(UUID, prop.processor_key),
            settings_argv("TotalDedicatedGPUMemory"),
        )


class GetGpuUuidsTests(unittest.TestCase):
    def test_smi_listing_extracts_uuids(self):
        runner = FakeRunner()
        runner.reply(
            ["nvidia-smi", "-L"],
            stdout="GPU 0: NVIDIA RTX X (UUID: GPU-abc123)\nGPU 1: NVIDIA RTX Y (UUID: GPU-def456)\n",
        )
        provider = Provider(ProviderKind.SMI, runner)
        self.assertEqual(provider.get_gpu_uuids(), ["GPU-abc123", "GPU-def456"])

    def test_optimus_listing_is_wrapped(self):
        runner = FakeRunner()
        runner.reply(["optirun", "nvidia-smi", "-L"], stdout="GPU 0: NVIDIA RTX X (UUID: GPU-abc123)\n")
        self.assertEqual(Provider(ProviderKind.OPTIMUS, runner).get_gpu_uuids(), ["GPU-abc123"])

    def test_settings_listing_is_one_uuid_per_line(self):
        runner = FakeRunner()
        runner.reply(["nvidia-settings", "-q", "GpuUUID", "-t"], stdout="GPU-abc123\nGPU-def456\n")
        for kind in (ProviderKind.SETTINGS, ProviderKind.SETTINGS_AND_SMI):
            self.assertEqual(Provider(kind, runner).get_gpu_uuids(), ["GPU-abc123", "GPU-def456"])

    def test_malformed_listing_is_an_error(self):
        runner = FakeRunner()
        runner.reply(["nvidia-smi", "-L"], stdout="GPU 0: NVIDIA RTX X\n")
        with self.assertRaises(MalformedUuidOutputError):
            Provider(ProviderKind.SMI, runner).get_gpu_uuids()

    def test_empty_listing_is_an_error(self):
        with self.assertRaises(ProcessOutputError):
            Provider(ProviderKind.SMI, FakeRunner()).get_gpu_uuids()


class GetGpuDataTests(unittest.TestCase):
    def test_temperature_end_to_end(self):
        runner = FakeRunner()
        runner.reply(smi_argv("temperature.gpu"), stdout="47\n")
        provider = Provider(ProviderKind.SMI, runner)
        self.assertEqual(provider.get_gpu_data(UUID, "temp", {"tempformat": 0}), "47°C")
        self.assertEqual(provider.get_gpu_data(UUID, "temp", {"tempformat": 1}), "116°F")

    def test_name_is_not_cleaned(self):
        runner = FakeRunner()
        runner.reply(smi_argv("gpu_name"), stdout="NVIDIA GeForce RTX 3070\n")
        provider = Provider(ProviderKind.SMI, runner)
        self.assertEqual(provider.get_gpu_data(UUID, "name"), "NVIDIA GeForce RTX 3070")

    def test_unknown_metric(self):
        provider = Provider(ProviderKind.SETTINGS, FakeRunner())
        with self.assertRaises(UnknownMetricError):
            provider.get_gpu_data(UUID, "fan_speed")
        with self.assertRaises(UnknownMetricError):
            provider.get_gpu_data(UUID, "clock_speed")

    def test_no_data_is_an_error(self):
        provider = Provider(ProviderKind.SMI, FakeRunner())
        with self.assertRaises(ProcessOutputError):
            provider.get_gpu_data(UUID, "power_usage")

    def test_invalid_value_is_a_parse_error(self):
        runner = FakeRunner()
        runner.reply(smi_argv("fan.speed"), stdout="[N/A]\n")
        with self.assertRaises(ParseError):
            Provider(ProviderKind.SMI, runner).get_gpu_data(UUID, "fan_speed")

    def test_combined_utilization_single_metric(self):
        runner = FakeRunner()
        runner.reply(settings_argv("GPUUtilization"), stdout="graphics=12, memory=4, video=0, PCIe=0\n")
        provider = Provider(ProviderKind.SETTINGS, runner)
        self.assertEqual(provider.get_gpu_data(UUID, "util"), "12 %")
        self.assertEqual(provider.get_gpu_data(UUID, "mem_ctrl_util"), "4 %")


class ReadGpuTests(unittest.TestCase):
    def test_shared_utilization_is_queried_once(self):
        runner = FakeRunner()
        runner.reply(settings_argv("GPUUtilization"), stdout="graphics=12, memory=4, video=0, PCIe=0\n")
        runner.reply(settings_argv("GPUCoreTemp"), stdout="75\n")
        provider = Provider(ProviderKind.SETTINGS, runner)

        reading = provider.read_gpu(UUID, ["util", "mem_ctrl_util", "temp"], {"tempformat": 1})

        self.assertEqual(reading.values, {"util": "12 %", "mem_ctrl_util": "4 %", "temp": "167°F"})
        self.assertEqual(reading.errors, {})
        self.assertEqual(runner.calls.count(settings_argv("GPUUtilization")), 1)
        self.assertEqual(len(runner.calls), 2)

    def test_failures_are_isolated_per_metric(self):
        runner = FakeRunner()
        runner.reply(smi_argv("gpu_name"), stdout="NVIDIA RTX X\n")
        runner.reply(smi_argv("utilization.gpu"), stdout="23 %\n")
        runner.reply(smi_argv("fan.speed"), stdout="[N/A]\n")
        runner.reply(smi_argv("power.draw"), stderr="Unable to determine power")
        provider = Provider(ProviderKind.SMI, runner)

        reading = provider.read_gpu(UUID, ["name", "util", "fan_speed", "power_usage", "temp"])

        self.assertEqual(reading.values, {"name": "NVIDIA RTX X", "util": "23 %"})
        self.assertIsInstance(reading.errors["fan_speed"], ParseError)
        self.assertIsInstance(reading.errors["power_usage"], ProcessOutputError)
        self.assertIsInstance(reading.errors["temp"], ProcessOutputError)
        self.assertEqual(reading.display("fan_speed"), "N/A")
        self.assertEqual(reading.title, "NVIDIA RTX X")

    def test_unknown_temperature_format_only_fails_temperature(self):
        runner = FakeRunner()
        runner.reply(smi_argv("utilization.gpu"), stdout="23 %\n")
        runner.reply(smi_argv("temperature.gpu"), stdout="47\n")
        provider = Provider(ProviderKind.SMI, runner)

        reading = provider.read_gpu(UUID, ["util", "temp"], {"tempformat": 2})

        self.assertEqual(reading.values, {"util": "23 %"})
        self.assertIsInstance(reading.errors["temp"], ParseError)

    def test_unsupported_metric_is_recorded(self):
        provider = Provider(ProviderKind.SETTINGS, FakeRunner())
        reading = provider.read_gpu(UUID, ["fan_speed"])
        self.assertIsInstance(reading.errors["fan_speed"], UnknownMetricError)
        self.assertEqual(reading.title, UUID)


class OpenSettingsTests(unittest.TestCase):
    def test_settings_kinds_spawn_nvidia_settings(self):
        runner = FakeRunner()
        self.assertTrue(Provider(ProviderKind.SETTINGS_AND_SMI, runner).open_settings())
        self.assertEqual(runner.spawned, [["nvidia-settings"]])

    def test_not_reopened_while_running(self):
        runner = FakeRunner()
        provider = Provider(ProviderKind.SETTINGS, runner)
        self.assertTrue(provider.open_settings())
        self.assertFalse(provider.open_settings())
        self.assertEqual(len(runner.spawned), 1)

        runner.processes[0].returncode = 0
        self.assertTrue(provider.open_settings())
        self.assertEqual(len(runner.spawned), 2)

    def test_smi_kinds_refuse(self):
        for kind in (ProviderKind.SMI, ProviderKind.OPTIMUS):
            with self.assertRaises(ProviderError):
                Provider(kind, FakeRunner()).open_settings()

    def test_cancel_reaches_runner(self):
        runner = FakeRunner()
        Provider(ProviderKind.SMI, runner).cancel()
        self.assertEqual(runner.cancel_count, 1)


if __name__ == "__main__":
    unittest.main()
