import sys
from pathlib import Path

def main():
    if len(sys.argv) != 3:
        print("Usage: truncate_capture.py <file> <nbytes>")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    n = int(sys.argv[2])
    b = p.read_bytes()
    if n <= 0 or n > len(b):
        print(f"Cannot drop {n} bytes from a {len(b)}-byte capture.")
        raise SystemExit(2)

    # Simulates a capture cut off mid-message, as when the dump
    # is taken while the channel is still being written.
    p.write_bytes(b[:-n])
    print(f"Dropped {n} trailing bytes from {p} ({len(b) - n} bytes left)")

if __name__ == "__main__":
    main()
