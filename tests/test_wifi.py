from network_manager.connection import ConnectionState
from network_manager.dbus_nm import NetworkManagerClient
from network_manager.device import Device
from network_manager.security import NoCredentials, Security, WpaCredentials
from network_manager.ssid import Ssid
from network_manager.wifi import AccessPoint, WiFiDevice

from conftest import NM, NM_PATH, FakeBus

WLAN0 = "/org/freedesktop/NetworkManager/Devices/3"
AP_PATH = "/org/freedesktop/NetworkManager/AccessPoint"
SETTINGS = "/org/freedesktop/NetworkManager/Settings"
ACTIVE = "/org/freedesktop/NetworkManager/ActiveConnection"


def _wifi(fake_bus: FakeBus, client: NetworkManagerClient) -> WiFiDevice:
    fake_bus.add_device(WLAN0, "wlan0", 2, state=100)
    return Device(client, WLAN0).as_wifi_device()


def test_access_points_sorted_by_strength_with_security(
    fake_bus: FakeBus, client: NetworkManagerClient
) -> None:
    wifi = _wifi(fake_bus, client)
    fake_bus.add_access_point(f"{AP_PATH}/1", WLAN0, b"Cafe", 40)
    fake_bus.add_access_point(f"{AP_PATH}/2", WLAN0, b"Home", 90, flags=1, rsn_flags=0x188)
    fake_bus.add_access_point(f"{AP_PATH}/3", WLAN0, b"Legacy", 65, flags=1)
    fake_bus.add_access_point(f"{AP_PATH}/4", WLAN0, b"Corp", 70, flags=1, wpa_flags=0x240, rsn_flags=0x288)

    access_points = wifi.get_access_points()

    assert [ap.ssid.as_str() for ap in access_points] == ["Home", "Corp", "Legacy", "Cafe"]
    assert [ap.strength for ap in access_points] == [90, 70, 65, 40]
    assert [ap.security for ap in access_points] == [
        Security.WPA2,
        Security.WPA | Security.WPA2 | Security.ENTERPRISE,
        Security.WEP,
        Security.NONE,
    ]


def test_access_points_that_vanish_during_scan_are_skipped(
    fake_bus: FakeBus, client: NetworkManagerClient
) -> None:
    wifi = _wifi(fake_bus, client)
    fake_bus.add_access_point(f"{AP_PATH}/1", WLAN0, b"Cafe", 40)
    # Listed by the device, but the object is already gone.
    fake_bus._access_points[WLAN0].append(f"{AP_PATH}/2")

    access_points = wifi.get_access_points()

    assert [ap.path for ap in access_points] == [f"{AP_PATH}/1"]


def test_request_scan_targets_wireless_interface(fake_bus: FakeBus, client: NetworkManagerClient) -> None:
    wifi = _wifi(fake_bus, client)
    fake_bus.add_method(WLAN0, f"{NM}.Device.Wireless", "RequestScan", ("", ()))

    wifi.request_scan()

    assert fake_bus.calls("RequestScan") == [(WLAN0, ({},))]


def test_connect_adds_connection_and_waits_for_activation(
    fake_bus: FakeBus, client: NetworkManagerClient, sleeps: list[float]
) -> None:
    wifi = _wifi(fake_bus, client)
    access_point = AccessPoint(f"{AP_PATH}/7", Ssid(b"Home"), 80, Security.WPA2)
    sent_settings = []

    def add_and_activate(settings, device, specific):
        sent_settings.append(settings)
        fake_bus.add_connection(f"{SETTINGS}/12", id="Home", ssid=b"Home")
        fake_bus.add_active_connection(f"{ACTIVE}/4", f"{SETTINGS}/12", state=fake_bus.sequence(1, 2))
        return ("oo", (f"{SETTINGS}/12", f"{ACTIVE}/4"))

    fake_bus.add_method(NM_PATH, NM, "AddAndActivateConnection", add_and_activate)

    connection, state = wifi.connect(access_point, WpaCredentials("supersecret"), timeout=10)

    assert connection.path == f"{SETTINGS}/12"
    assert connection.settings.ssid == Ssid(b"Home")
    assert state == ConnectionState.ACTIVATED
    assert sent_settings[0]["802-11-wireless-security"]["psk"] == ("s", "supersecret")
    assert sleeps == [1.0, 1.0]


def test_connect_reports_state_when_activation_stalls(
    fake_bus: FakeBus, client: NetworkManagerClient, sleeps: list[float]
) -> None:
    wifi = _wifi(fake_bus, client)
    access_point = AccessPoint(f"{AP_PATH}/7", Ssid(b"Open"), 50, Security.NONE)

    def add_and_activate(settings, device, specific):
        fake_bus.add_connection(f"{SETTINGS}/13", id="Open", ssid=b"Open")
        fake_bus.add_active_connection(f"{ACTIVE}/5", f"{SETTINGS}/13", state=1)
        return ("oo", (f"{SETTINGS}/13", f"{ACTIVE}/5"))

    fake_bus.add_method(NM_PATH, NM, "AddAndActivateConnection", add_and_activate)

    _connection, state = wifi.connect(access_point, NoCredentials(), timeout=3)

    assert state == ConnectionState.ACTIVATING
    assert len(sleeps) == 3


def test_create_hotspot_accepts_text_ssid(
    fake_bus: FakeBus, client: NetworkManagerClient, sleeps: list[float]
) -> None:
    wifi = _wifi(fake_bus, client)
    received = []

    def add_and_activate(settings, device, specific):
        received.append((settings, device, specific))
        fake_bus.add_connection(f"{SETTINGS}/20", id="RevHotspot", ssid=b"RevHotspot", mode="ap")
        fake_bus.add_active_connection(f"{ACTIVE}/9", f"{SETTINGS}/20", state=2)
        return ("oo", (f"{SETTINGS}/20", f"{ACTIVE}/9"))

    fake_bus.add_method(NM_PATH, NM, "AddAndActivateConnection", add_and_activate)

    connection, state = wifi.create_hotspot("RevHotspot", "hotspot-pass", "10.42.0.1", timeout=5)

    settings, device, specific = received[0]
    assert (device, specific) == (WLAN0, "/")
    assert settings["connection"]["interface-name"] == ("s", "wlan0")
    assert settings["802-11-wireless"]["ssid"] == ("ay", b"RevHotspot")
    assert settings["ipv4"]["method"] == ("s", "manual")
    assert connection.settings.mode == "ap"
    assert state == ConnectionState.ACTIVATED
    assert sleeps == [1.0]


def test_access_point_to_dict_lists_security_names() -> None:
    access_point = AccessPoint("/ap/1", Ssid(b"Home"), 80, Security.WPA | Security.WPA2)
    assert access_point.to_dict() == {
        "path": "/ap/1",
        "ssid": "Home",
        "strength": 80,
        "security": ["wpa", "wpa2"],
    }
