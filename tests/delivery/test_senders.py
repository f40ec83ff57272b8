"""Tests for HTTP, file and stdout senders."""

import json
from http.client import IncompleteRead
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError

import pytest

from eis_app.config.delivery import (
    DeliveryConfig,
    DeliveryDestination,
    DeliveryMethod,
    FileDeliveryConfig,
    HttpDeliveryConfig,
    StdoutDeliveryConfig,
    create_file_destination,
    create_http_destination,
)
from eis_app.delivery import build_senders
from eis_app.delivery.base import (
    DeliveryPermanentError,
    DeliveryResult,
    DeliveryRetryableError,
    DeliveryStatus,
)
from eis_app.delivery.file_delivery import FileSender
from eis_app.delivery.http_delivery import HttpSender
from eis_app.delivery.stdout_delivery import StdoutSender

POINTS = [
    {"frequency": 100.0, "real": 10.5, "imag": -2.25},
    {"frequency": 10.0, "real": 12.0, "imag": -4.0},
]


def mock_response(code: int = 200, body: bytes = b"ok") -> MagicMock:
    response = MagicMock()
    response.getcode.return_value = code
    response.read.return_value = body
    response.__enter__.return_value = response
    return response


@pytest.fixture
def http_sender() -> HttpSender:
    return HttpSender("http", HttpDeliveryConfig(url="http://localhost:8080/eis-data", timeout_seconds=2))


class TestHttpSender:

    def test_invalid_url(self):
        with pytest.raises(DeliveryPermanentError):
            HttpSender("bad", HttpDeliveryConfig(url="not-a-url"))

    @pytest.mark.parametrize("code", [200, 202])
    def test_accepted_status(self, http_sender, code):
        with patch("eis_app.delivery.http_delivery.urlopen", return_value=mock_response(code)) as mock_urlopen:
            result = http_sender.send(POINTS, "EIS-Points")

        assert result.status == DeliveryStatus.SUCCESS
        request = mock_urlopen.call_args.args[0]
        assert request.full_url == "http://localhost:8080/eis-data"
        assert request.get_header("X-data-type") == "EIS-Points"
        assert request.get_header("Content-type") == "application/json"
        assert json.loads(request.data) == POINTS
        assert mock_urlopen.call_args.kwargs["timeout"] == 2
        assert http_sender.health_check()

    def test_unexpected_success_code_is_permanent(self, http_sender):
        with patch("eis_app.delivery.http_delivery.urlopen", return_value=mock_response(204, b"")):
            with pytest.raises(DeliveryPermanentError) as exc_info:
                http_sender.send(POINTS, "EIS-Points")

        assert exc_info.value.status_code == 204
        assert not http_sender.health_check()

    def test_server_error_is_retryable(self, http_sender):
        error = HTTPError("http://localhost:8080/eis-data", 503, "Unavailable", {}, None)
        with patch("eis_app.delivery.http_delivery.urlopen", side_effect=error):
            with pytest.raises(DeliveryRetryableError) as exc_info:
                http_sender.send(POINTS, "EIS-Points")

        assert exc_info.value.status_code == 503

    def test_client_error_is_permanent(self, http_sender):
        error = HTTPError("http://localhost:8080/eis-data", 400, "Bad Request", {}, None)
        with patch("eis_app.delivery.http_delivery.urlopen", side_effect=error):
            with pytest.raises(DeliveryPermanentError):
                http_sender.send(POINTS, "EIS-Points")

    def test_network_error_is_retryable(self, http_sender):
        with patch("eis_app.delivery.http_delivery.urlopen", side_effect=URLError("refused")):
            with pytest.raises(DeliveryRetryableError):
                http_sender.send(POINTS, "EIS-Points")

    def test_batch_endpoint(self, http_sender):
        with patch("eis_app.delivery.http_delivery.urlopen", return_value=mock_response()) as mock_urlopen:
            http_sender.send_batch({"batch_id": "batch_1_0", "spectra": []})

        request = mock_urlopen.call_args.args[0]
        assert request.full_url == "http://localhost:8080/eis-data/batch"
        assert request.get_header("X-data-type") == "Impedance-Batch"

    def test_retry_then_dead_letter(self, http_sender):
        with patch("eis_app.delivery.http_delivery.urlopen", side_effect=URLError("refused")) as mock_urlopen:
            result = http_sender.send_with_retry(POINTS, "EIS-Points", max_retries=2, retry_delay=0)

        assert result.status == DeliveryStatus.DEAD_LETTER
        assert result.attempt_count == 3
        assert mock_urlopen.call_count == 3
        assert http_sender.get_stats()["error_count"] == 1

    def test_permanent_error_not_retried(self, http_sender):
        error = HTTPError("http://localhost:8080/eis-data", 404, "Not Found", {}, None)
        with patch("eis_app.delivery.http_delivery.urlopen", side_effect=error) as mock_urlopen:
            result = http_sender.send_with_retry(POINTS, "EIS-Points", max_retries=3, retry_delay=0)

        assert result.status == DeliveryStatus.FAILED
        assert mock_urlopen.call_count == 1

    def test_retry_recovers(self, http_sender):
        responses = [URLError("refused"), mock_response()]
        with patch("eis_app.delivery.http_delivery.urlopen", side_effect=responses):
            result = http_sender.send_with_retry(POINTS, "EIS-Points", max_retries=1, retry_delay=0)

        assert result.status == DeliveryStatus.SUCCESS
        assert result.attempt_count == 2
        assert http_sender.get_stats()["success_rate"] == 1.0

    def test_batch_retry_recovers(self, http_sender):
        responses = [URLError("refused"), mock_response()]
        with patch("eis_app.delivery.http_delivery.urlopen", side_effect=responses) as mock_urlopen:
            result = http_sender.send_batch_with_retry({"batch_id": "batch_1_0", "spectra": []}, max_retries=2, retry_delay=0)

        assert result.status == DeliveryStatus.SUCCESS
        assert result.attempt_count == 2
        assert mock_urlopen.call_args.args[0].full_url == "http://localhost:8080/eis-data/batch"

    def test_batch_retry_dead_letter(self, http_sender):
        with patch("eis_app.delivery.http_delivery.urlopen", side_effect=URLError("refused")) as mock_urlopen:
            result = http_sender.send_batch_with_retry({"batch_id": "batch_1_0", "spectra": []}, max_retries=1, retry_delay=0)

        assert result.status == DeliveryStatus.DEAD_LETTER
        assert mock_urlopen.call_count == 2

    def test_unexpected_error_is_retried(self, http_sender):
        responses = [IncompleteRead(b""), mock_response()]
        with patch("eis_app.delivery.http_delivery.urlopen", side_effect=responses):
            result = http_sender.send_with_retry(POINTS, "EIS-Points", max_retries=1, retry_delay=0)

        assert result.status == DeliveryStatus.SUCCESS
        assert result.attempt_count == 2

    def test_unexpected_error_without_retries_fails(self, http_sender):
        with patch("eis_app.delivery.http_delivery.urlopen", side_effect=ValueError("bad header")):
            result = http_sender.send_with_retry(POINTS, "EIS-Points", retry_delay=0)

        assert result.status == DeliveryStatus.FAILED
        assert "bad header" in result.message


class TestFileSender:

    def test_json_output(self, tmp_path):
        sender = FileSender("console", FileDeliveryConfig(output_dir=str(tmp_path)))

        result = sender.send({"impedance": [{"real": 1.0, "imag": 0.0}]}, "Impedance-Data")

        assert result.status == DeliveryStatus.SUCCESS
        files = list((tmp_path / "json").glob("eis_measurement_*_001.json"))
        assert len(files) == 1
        assert json.loads(files[0].read_text())["impedance"][0]["real"] == 1.0

    def test_numbered_files(self, tmp_path):
        sender = FileSender("console", FileDeliveryConfig(output_dir=str(tmp_path)))

        sender.send(POINTS, "EIS-Points")
        sender.send(POINTS, "EIS-Points")

        names = sorted(p.name for p in (tmp_path / "json").iterdir())
        assert names[0].endswith("_001.json")
        assert names[1].endswith("_002.json")

    def test_csv_from_points(self, tmp_path):
        sender = FileSender("csv", FileDeliveryConfig(output_dir=str(tmp_path), format="csv"))

        sender.send(POINTS, "EIS-Points")

        written = next((tmp_path / "csv").glob("*.csv")).read_text().splitlines()
        assert written == ["frequency,real,imag", "100,10.500000,-2.250000", "10,12.000000,-4.000000"]

    def test_csv_from_measurement(self, tmp_path):
        sender = FileSender("csv", FileDeliveryConfig(output_dir=str(tmp_path), format="csv"))
        payload = {
            "voltage": {},
            "current": {},
            "impedance": {
                "impedance": [{"real": 2.0, "imag": -1.0}],
                "frequencies": [0.5],
            },
        }

        sender.send(payload, "EIS-Measurement")

        written = next((tmp_path / "csv").glob("*.csv")).read_text().splitlines()
        assert written[1] == "0.5,2.000000,-1.000000"

    def test_csv_without_impedance(self, tmp_path):
        sender = FileSender("csv", FileDeliveryConfig(output_dir=str(tmp_path), format="csv"))
        with pytest.raises(DeliveryPermanentError):
            sender.send({"voltage": {}}, "EIS-Measurement")

    def test_unsupported_format(self, tmp_path):
        with pytest.raises(DeliveryPermanentError):
            FileSender("xml", FileDeliveryConfig(output_dir=str(tmp_path), format="xml"))

    def test_health_check(self, tmp_path):
        sender = FileSender("console", FileDeliveryConfig(output_dir=str(tmp_path)))
        assert sender.health_check()
        assert not (tmp_path / "json" / ".health_check_test").exists()

    def test_missing_directory_is_retryable(self, tmp_path):
        config = FileDeliveryConfig(output_dir=str(tmp_path / "absent"), create_dirs=False)
        sender = FileSender("console", config)

        with pytest.raises(DeliveryRetryableError):
            sender.send(POINTS, "EIS-Points")
        assert not sender.health_check()


class TestStdoutSender:

    def test_prints_one_json_document(self, capsys):
        sender = StdoutSender("stdout", StdoutDeliveryConfig())

        result = sender.send(POINTS, "EIS-Points")

        assert result.status == DeliveryStatus.SUCCESS
        out = capsys.readouterr().out
        assert json.loads(out) == POINTS
        assert out.count("\n") == 1

    def test_unserializable_payload(self):
        sender = StdoutSender("stdout", StdoutDeliveryConfig())
        with pytest.raises(DeliveryPermanentError):
            sender.send({"value": object()}, "EIS-Points")

    def test_broken_pipe_is_retryable(self):
        sender = StdoutSender("stdout", StdoutDeliveryConfig())

        with patch("eis_app.delivery.stdout_delivery.print", create=True, side_effect=BrokenPipeError(32, "Broken pipe")):
            with pytest.raises(DeliveryRetryableError):
                sender.send(POINTS, "EIS-Points")

    def test_broken_pipe_with_retry_returns_result(self):
        sender = StdoutSender("stdout", StdoutDeliveryConfig())

        with patch("eis_app.delivery.stdout_delivery.print", create=True, side_effect=BrokenPipeError(32, "Broken pipe")):
            result = sender.send_with_retry(POINTS, "EIS-Points", max_retries=1, retry_delay=0)

        assert result.status == DeliveryStatus.DEAD_LETTER
        assert result.attempt_count == 2


class TestBuildSenders:

    def test_one_sender_per_enabled_destination(self, tmp_path):
        config = DeliveryConfig(destinations=[
            create_http_destination("lab", "http://localhost:8080/eis-data"),
            create_file_destination("archive", str(tmp_path), format="csv"),
            DeliveryDestination("stdout", DeliveryMethod.STDOUT, StdoutDeliveryConfig()),
            create_file_destination("off", str(tmp_path), enabled=False),
        ])

        senders = build_senders(config)

        assert set(senders) == {"lab", "archive", "stdout"}
        assert isinstance(senders["lab"], HttpSender)
        assert isinstance(senders["archive"], FileSender)
        assert isinstance(senders["stdout"], StdoutSender)

    def test_invalid_destination_skipped(self):
        config = DeliveryConfig(destinations=[create_http_destination("bad", "nowhere")])
        assert build_senders(config) == {}

    def test_disabled_delivery(self, tmp_path):
        config = DeliveryConfig(destinations=[create_file_destination("a", str(tmp_path))], enabled=False)
        assert build_senders(config) == {}


def test_delivery_result_defaults():
    result = DeliveryResult(status=DeliveryStatus.SUCCESS)
    assert result.attempt_count == 1
    assert result.error is None
