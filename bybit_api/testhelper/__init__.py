"""Mock HTTP and websocket servers and golden-file helpers for tests."""