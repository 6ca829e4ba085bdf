"""
Build script to create a standalone executable using PyInstaller.

Usage:
    pip install pyinstaller
    python build.py

The executable lands in the dist/ folder.
"""
import subprocess
import sys

# Modules PyInstaller might miss (imported lazily by websockets)
HIDDEN_IMPORTS = [
    "guess_duel.network",
    "guess_duel.network.transport",
    "websockets.asyncio.client",
]


def build_command() -> list:
    """PyInstaller command line for the client."""
    hidden_import_args = []
    for module in HIDDEN_IMPORTS:
        hidden_import_args.extend(["--hidden-import", module])

    return [
        sys.executable, "-m", "PyInstaller",
        "--onefile",            # Single executable
        "--windowed",           # No console window
        "--name", "GuessDuel",
        *hidden_import_args,
        "main.py",
    ]


def build():
    cmd = build_command()

    print("\n" + "=" * 50)
    print("Building GuessDuel...")
    print("=" * 50)
    print(f"\nCommand: {' '.join(cmd)}\n")

    result = subprocess.run(cmd)

    if result.returncode == 0:
        print("\nBuild successful! Find the executable in dist/")
    else:
        print("\nBuild failed!")
        print("Make sure PyInstaller is installed: pip install pyinstaller")
    return result.returncode


if __name__ == "__main__":
    sys.exit(build())
