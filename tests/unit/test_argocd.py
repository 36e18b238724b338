"""Unit tests for ArgoCD installation and the port-forward PID lifecycle."""

import signal
from unittest.mock import MagicMock, patch

from gitops_demo.bootstrap.argocd import ArgoCDInstaller, PortForwardManager, pid_alive

from ..conftest import completed


class TestArgoCDInstaller:
    """Tests for ArgoCDInstaller."""

    def test_install(self):
        """Test namespace plus upstream manifest."""
        kubectl = MagicMock()
        ArgoCDInstaller(kubectl).install("https://example.com/install.yaml")
        kubectl.ensure_namespace.assert_called_once_with("argocd")
        kubectl.apply_url.assert_called_once_with("https://example.com/install.yaml", namespace="argocd")

    def test_admin_password(self):
        """Test the initial admin secret is read."""
        kubectl = MagicMock()
        kubectl.get_secret_value.return_value = "s3cret"
        assert ArgoCDInstaller(kubectl).admin_password() == "s3cret"
        kubectl.get_secret_value.assert_called_once_with("argocd-initial-admin-secret", "argocd", "password")

    def test_register_cluster_failure_is_soft(self, tmp_path):
        """Test argocd cluster add failures return False."""
        with patch("subprocess.run", return_value=completed(returncode=1, stderr="not logged in")):
            assert ArgoCDInstaller(MagicMock()).register_cluster(
                "kind-workload", tmp_path / "kc.yaml", "workload"
            ) is False

    def test_register_cluster(self, tmp_path):
        """Test argocd cluster add argv."""
        with patch("subprocess.run", return_value=completed()) as mock_run:
            assert ArgoCDInstaller(MagicMock()).register_cluster("kind-workload", tmp_path / "kc", "workload")
        argv = mock_run.call_args[0][0]
        assert argv[:4] == ["argocd", "cluster", "add", "kind-workload"]
        assert "--grpc-web" in argv


class TestPidAlive:
    """Tests for pid_alive."""

    def test_alive(self):
        """Test signal 0 success."""
        with patch("os.kill") as mock_kill:
            assert pid_alive(1234) is True
        mock_kill.assert_called_once_with(1234, 0)

    def test_gone(self):
        """Test a missing process."""
        with patch("os.kill", side_effect=ProcessLookupError):
            assert pid_alive(1234) is False

    def test_other_owner(self):
        """Test a process owned by another user counts as alive."""
        with patch("os.kill", side_effect=PermissionError):
            assert pid_alive(1) is True


class TestPortForwardManager:
    """Tests for the PID-file tracked port-forward."""

    def test_start_writes_pid(self, tmp_path):
        """Test the PID file is written."""
        kubectl = MagicMock()
        kubectl.port_forward.return_value = MagicMock(pid=4242)
        pid_file = tmp_path / "argocd-portforward.pid"

        pid = PortForwardManager(pid_file, kubectl).start(local_port=8080)

        assert pid == 4242
        assert pid_file.read_text() == "4242\n"
        kubectl.port_forward.assert_called_once_with("argocd", "argocd-server", 8080, 443, "0.0.0.0")

    def test_start_replaces_running(self, tmp_path):
        """Test a previous forward is stopped first."""
        pid_file = tmp_path / "pf.pid"
        pid_file.write_text("1111\n")
        kubectl = MagicMock()
        kubectl.port_forward.return_value = MagicMock(pid=2222)

        with patch("os.kill") as mock_kill:
            PortForwardManager(pid_file, kubectl).start()

        mock_kill.assert_any_call(1111, signal.SIGTERM)
        assert pid_file.read_text() == "2222\n"

    def test_stop_removes_pid_file(self, tmp_path):
        """Test stop signals and removes the PID file."""
        pid_file = tmp_path / "pf.pid"
        pid_file.write_text("1111\n")

        with patch("os.kill") as mock_kill:
            assert PortForwardManager(pid_file, MagicMock()).stop() is True

        mock_kill.assert_called_with(1111, signal.SIGTERM)
        assert not pid_file.exists()

    def test_stop_stale_pid(self, tmp_path):
        """Test a dead PID is cleaned up without signalling."""
        pid_file = tmp_path / "pf.pid"
        pid_file.write_text("1111\n")

        with patch("os.kill", side_effect=ProcessLookupError):
            assert PortForwardManager(pid_file, MagicMock()).stop() is False
        assert not pid_file.exists()

    def test_read_pid_garbage(self, tmp_path):
        """Test an unreadable PID file means not running."""
        pid_file = tmp_path / "pf.pid"
        pid_file.write_text("not-a-pid")
        manager = PortForwardManager(pid_file, MagicMock())
        assert manager.read_pid() is None
        assert manager.is_running() is False
