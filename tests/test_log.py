import datetime

import pytest

from drinkctl import log
from drinkctl.log import CLOCK_FORMAT, Logger, get_logger, get_time, set_logger


@pytest.fixture
def restore_logger():
    previous = get_logger()
    yield
    set_logger(previous)


def test_get_time_date_stamp():
    moment = datetime.datetime(2015, 5, 22, 12, 10, 31)
    assert get_time(False, moment) == "22052015"


def test_get_time_clock_stamp():
    moment = datetime.datetime(2015, 5, 22, 12, 10, 31)
    assert get_time(True, moment) == "22/05-2015@12:10:31"


def test_get_time_defaults_to_now():
    stamp = get_time(True)
    parsed = datetime.datetime.strptime(stamp, CLOCK_FORMAT)
    assert abs(datetime.datetime.now() - parsed) < datetime.timedelta(minutes=1)


def test_logger_writes_stamped_line(tmp_path):
    with Logger(tmp_path) as logger:
        logger.log("Database loaded.")
    assert logger.path == tmp_path / get_time(False)
    stamp, text = logger.path.read_text(encoding="utf-8").rstrip("\n").split(":\t")
    assert text == "Database loaded."
    datetime.datetime.strptime(stamp, CLOCK_FORMAT)


def test_logger_appends(tmp_path):
    with Logger(tmp_path) as first:
        first.log("one")
    with Logger(tmp_path) as second:
        second.log("two")
    lines = second.path.read_text(encoding="utf-8").splitlines()
    assert [line.split(":\t")[1] for line in lines] == ["one", "two"]


def test_logger_without_directory_uses_stderr(capsys):
    Logger().log("Server started")
    assert capsys.readouterr().err.endswith(":\tServer started\n")


def test_set_and_get_logger(tmp_path, restore_logger):
    custom = Logger(tmp_path)
    set_logger(custom)
    assert get_logger() is custom
    assert log.get_logger() is get_logger()
    custom.close()