import io

from linechat import console_client


def test_connect_failure_exits_with_error(closed_port, capsys):
    assert console_client.main(["127.0.0.1", str(closed_port)]) == 1
    out, err = capsys.readouterr()
    assert "Error: Unable to connect to server." in err
    assert "Connected to" not in out


def test_chat_until_exit(peer, monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("hello\n\nEXIT\nnever sent\n"))

    assert console_client.main([peer.host, str(peer.port)]) == 0

    peer.accept()
    assert peer.recv_line() == "hello"
    assert peer.recv_line() is None
    out, _ = capsys.readouterr()
    assert f"Connected to 127.0.0.1 on port: {peer.port}" in out
    assert out.rstrip().endswith("Connection closed.")


def test_default_address():
    args = console_client.parse_args([])
    assert args.host == "127.0.0.1"
    assert args.port == 2000
