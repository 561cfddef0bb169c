#!/usr/bin/env python3
"""
Integration tests to ensure the command line runner works end to end
"""

import sys
import os
import subprocess
import tempfile

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

def run_pypals(*extra):
    """Run pypals and return output"""
    cmd = [sys.executable, "pypals.py", "--no-color", *extra]

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=30, cwd=ROOT)
        return result.returncode, result.stdout, result.stderr
    except subprocess.TimeoutExpired:
        return -1, "", "Timeout"

def run_pypals_on_tty(*extra):
    """Run pypals with stdout on a pseudo-terminal and return the raw bytes written"""
    import pty
    master, slave = pty.openpty()
    cmd = [sys.executable, "pypals.py", *extra]
    proc = subprocess.Popen(cmd, stdout=slave, stderr=subprocess.DEVNULL, cwd=ROOT)
    os.close(slave)
    chunks = []
    while True:
        try:
            data = os.read(master, 1024)
        except OSError:
            # EIO once the child closes its end
            break
        if not data:
            break
        chunks.append(data)
    os.close(master)
    return proc.wait(timeout=30), b"".join(chunks)

def test_all_challenges_ok():
    """Test the default run passes every scenario"""
    print("Testing default run...")

    returncode, stdout, stderr = run_pypals()

    assert returncode == 0, f"Expected success, got return code {returncode}: {stdout}{stderr}"
    assert stdout.startswith("Pypals!"), f"Expected banner in output: {stdout}"
    for n in (1, 2, 3):
        assert f"Challenge {n}: OK" in stdout, f"Expected 'Challenge {n}: OK' in output: {stdout}"
    assert "Hex invalid pair: OK" in stdout, f"Expected error scenarios in output: {stdout}"
    assert "Challenge 4" not in stdout, "Challenge 4 should only run with a lines file"

    print("✅ Default run test passed")

def test_debug_goes_to_stderr():
    """Test debug lines are written to stderr, not the report"""
    print("Testing debug output...")

    returncode, stdout, stderr = run_pypals("-d")

    assert returncode == 0, f"Expected success, got return code {returncode}"
    assert "[RUN] Challenge 1" in stderr, f"Expected debug line in stderr: {stderr}"
    assert "[RUN]" not in stdout

    print("✅ Debug output test passed")

def test_missing_lines_file():
    """Test a missing lines file turns into a failed Challenge 4 and exit 1"""
    print("Testing missing lines file...")

    returncode, stdout, stderr = run_pypals("-l", os.path.join(ROOT, "does-not-exist.txt"))

    assert returncode == 1, f"Expected exit 1, got {returncode}"
    assert "Challenge 4: " in stdout and "No such file" in stdout, f"Expected file error in output: {stdout}"
    assert "Challenge 3: OK" in stdout, "Other scenarios should still run"

    print("✅ Missing lines file test passed")

def test_lines_file_challenge():
    """Test Challenge 4 against a generated lines file"""
    print("Testing lines file challenge...")

    plain = b"Now that the party is jumping\n"
    secret = bytes(b ^ 0x35 for b in plain).hex()
    noise = [bytes((i * 53 + j * 7) % 256 for j in range(30)).hex() for i in range(8)]

    with tempfile.TemporaryDirectory() as d:
        path = os.path.join(d, "4.txt")
        with open(path, "w", encoding="ascii") as f:
            f.write("\n".join(noise[:5] + [secret] + noise[5:]))
        returncode, stdout, stderr = run_pypals("-l", path)

    assert returncode == 0, f"Expected success, got return code {returncode}: {stdout}"
    assert "Challenge 4: OK" in stdout, f"Expected 'Challenge 4: OK' in output: {stdout}"

    print("✅ Lines file challenge test passed")

def test_no_color_on_terminal():
    """Test --no-color writes no escape sequences even when stdout is a terminal"""
    if os.name != "posix":
        return
    print("Testing --no-color on a terminal...")

    returncode, out = run_pypals_on_tty("--no-color")

    assert returncode == 0, f"Expected success, got return code {returncode}: {out!r}"
    assert b"Challenge 1: OK" in out, f"Expected report in output: {out!r}"
    assert b"\x1b[" not in out, f"Expected no ANSI escapes: {out!r}"

    print("✅ No-color terminal test passed")

def test_color_on_terminal():
    """Test OK lines are green when color is on"""
    if os.name != "posix":
        return
    print("Testing color on a terminal...")

    returncode, out = run_pypals_on_tty()

    assert returncode == 0, f"Expected success, got return code {returncode}: {out!r}"
    assert b"Challenge 1: \x1b[32mOK" in out, f"Expected green OK in output: {out!r}"

    print("✅ Color terminal test passed")

def run_all_tests():
    """Run all integration tests"""
    print("🧪 Running integration tests...")
    print("=" * 50)

    try:
        test_all_challenges_ok()
        test_debug_goes_to_stderr()
        test_missing_lines_file()
        test_lines_file_challenge()
        test_no_color_on_terminal()
        test_color_on_terminal()

        print("=" * 50)
        print("🎉 All integration tests passed!")
        return True

    except AssertionError as e:
        print(f"❌ Test failed: {e}")
        return False
    except Exception as e:
        print(f"❌ Unexpected error: {e}")
        import traceback
        traceback.print_exc()
        return False

if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
