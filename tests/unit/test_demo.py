"""Unit tests for the provisioning and update demo helpers."""

from unittest.mock import MagicMock

import pytest

from gitops_demo.bootstrap.demo import (
    WorkloadInspector,
    bootstrap_manifest,
    filter_lines,
    find_field,
    read_field,
    section_lines,
    set_field,
)
from gitops_demo.errors import ManifestEditError


class TestManifestFields:
    """Tests for reading and editing the BootstrapStack claim."""

    def test_bootstrap_manifest_path(self, platform_repo):
        """Test claim path layout."""
        path = bootstrap_manifest(platform_repo, "prod")
        assert path.name == "prod-bootstrap.yaml"
        assert path.exists()

    def test_find_field_nested(self):
        """Test depth-first lookup through dicts and lists."""
        data = {"spec": {"items": [{"a": 1}, {"prometheusVersion": "45.0.0"}]}}
        assert find_field(data, "prometheusVersion") == "45.0.0"
        assert find_field(data, "missing") is None

    def test_read_field(self, platform_repo):
        """Test reading the pinned version."""
        assert read_field(bootstrap_manifest(platform_repo, "prod"), "prometheusVersion") == "45.0.0"

    def test_set_field_keeps_formatting(self, platform_repo):
        """Test only the value changes; quotes and comment survive."""
        path = bootstrap_manifest(platform_repo, "prod")
        before = path.read_text()

        set_field(path, "prometheusVersion", "45.0.0", "46.0.0")

        after = path.read_text()
        assert '    prometheusVersion: "46.0.0"  # pinned for the demo' in after
        assert before.replace("45.0.0", "46.0.0") == after

    def test_set_field_missing(self, tmp_path):
        """Test a missing key is an edit error."""
        path = tmp_path / "claim.yaml"
        path.write_text("spec:\n  monitoring:\n    enabled: true\n")
        with pytest.raises(ManifestEditError):
            set_field(path, "prometheusVersion", "45.0.0", "46.0.0")

    def test_set_field_wrong_old_value(self, platform_repo):
        """Test the file is left alone when it holds another version."""
        path = bootstrap_manifest(platform_repo, "prod")
        before = path.read_text()

        with pytest.raises(ManifestEditError) as exc_info:
            set_field(path, "prometheusVersion", "44.0.0", "46.0.0")

        assert exc_info.value.hint
        assert path.read_text() == before

    def test_read_field_invalid_yaml(self, tmp_path):
        """Test a malformed claim is an edit error, not a YAML traceback."""
        path = tmp_path / "claim.yaml"
        path.write_text("spec:\n  monitoring: [unclosed\n")
        with pytest.raises(ManifestEditError) as exc_info:
            read_field(path, "prometheusVersion")
        assert "claim.yaml is not valid YAML" in str(exc_info.value)

    def test_set_field_unquoted(self, tmp_path):
        """Test an unquoted value is rewritten unquoted."""
        path = tmp_path / "claim.yaml"
        path.write_text("spec:\n  prometheusVersion: 45.0.0\n")
        set_field(path, "prometheusVersion", "45.0.0", "46.0.0")
        assert path.read_text() == "spec:\n  prometheusVersion: 46.0.0\n"

    def test_section_lines(self, platform_repo):
        """Test section display grabs the heading and the next lines."""
        text = section_lines(bootstrap_manifest(platform_repo, "prod"), "monitoring")
        assert text.splitlines() == [
            "  monitoring:",
            "    enabled: true",
            '    prometheusVersion: "45.0.0"  # pinned for the demo',
        ]

    def test_section_lines_missing(self, platform_repo):
        """Test an absent heading gives an empty string."""
        assert section_lines(bootstrap_manifest(platform_repo, "prod"), "logging") == ""


class TestFilterLines:
    """Tests for the grep-like filter."""

    def test_prefix(self):
        """Test prefix filtering drops the header."""
        text = "NAME   DATA\nprod-status  1\nstaging-status  1\n"
        assert filter_lines(text, prefix="prod-") == "prod-status  1"

    def test_names(self):
        """Test name filtering drops the NAME row by default."""
        text = "NAME  STATUS\ndefault  Active\nmonitoring  Active\n"
        assert filter_lines(text, names=("monitoring",)) == "monitoring  Active"

    def test_names_with_header(self):
        """Test header=True puts the NAME row back in front of the matches."""
        text = "NAME  STATUS\ndefault  Active\nmonitoring  Active\n"
        assert filter_lines(text, names=("monitoring",), header=True) == "NAME  STATUS\nmonitoring  Active"

    def test_header_only_is_none(self):
        """Test a table with no matching rows gives None even with header=True."""
        text = "NAME              STATUS   AGE\ndefault           Active   1m\nkube-system       Active   1m\n"
        assert filter_lines(text, names=("monitoring", "ingress", "logging")) is None
        assert filter_lines(text, names=("monitoring",), header=True) is None

    def test_nothing_matches(self):
        """Test no match gives None."""
        assert filter_lines("NAME\nfoo\n", prefix="prod-") is None
        assert filter_lines(None, prefix="prod-") is None


class TestWorkloadInspector:
    """Tests for the read-only cluster queries."""

    def test_deployed_version(self):
        """Test version is read from the monitoring configmap."""
        workload = MagicMock()
        workload.get_jsonpath.return_value = "46.0.0\n"

        inspector = WorkloadInspector(MagicMock(), workload)

        assert inspector.deployed_version() == "46.0.0"
        workload.get_jsonpath.assert_called_once_with(
            "configmap/prod-monitoring", "{.data.version}", "monitoring"
        )

    def test_deployed_version_missing(self):
        """Test None when the configmap is not there yet."""
        workload = MagicMock()
        workload.get_jsonpath.return_value = None
        assert WorkloadInspector(MagicMock(), workload).deployed_version() is None

    def test_bootstrap_status_block(self):
        """Test the Status block is cut from describe output."""
        management = MagicMock()
        management.get_text.return_value = "Name: prod-cluster\nSpec:\n  x: 1\nStatus:\n  Ready: True\n"

        status = WorkloadInspector(management, MagicMock()).bootstrap_status("prod")

        assert status == "Status:\n  Ready: True"
        assert "prod-cluster" in management.get_text.call_args[0]

    def test_bootstrap_status_unavailable(self):
        """Test None when describe fails."""
        management = MagicMock()
        management.get_text.return_value = None
        assert WorkloadInspector(management, MagicMock()).bootstrap_status("prod") is None

    def test_report_filters_by_environment(self):
        """Test report keeps only the environment's objects."""
        management = MagicMock()
        management.get_text.side_effect = [
            "NAME  READY\nprod-cluster  True",
            "NAME  DATA\nprod-status  1\nstaging-status  1",
        ]
        workload = MagicMock()
        workload.get_text.side_effect = [
            "NAME  STATUS\nmonitoring  Active\nkube-system  Active",
            "NAME  DATA\nprod-monitoring  1\nkube-root-ca.crt  1",
        ]

        report = WorkloadInspector(management, workload).report("prod")

        assert report.bootstrap_stack.endswith("prod-cluster  True")
        assert report.status_configmaps == "prod-status  1"
        assert report.workload_namespaces == "monitoring  Active"
        assert report.workload_configmaps == "prod-monitoring  1"
