import os
import shutil
import subprocess
import sys
import webbrowser


def check_pandoc():
    print("Checking for pandoc...")
    if shutil.which("pandoc"):
        print("pandoc is already installed!")
        return True
    return False


def install_with_winget():
    print("Attempting to install pandoc using Winget...")
    try:
        subprocess.run(["winget", "install", "JohnMacFarlane.Pandoc"], check=True)
        print("pandoc installed successfully via Winget.")
        return True
    except (subprocess.CalledProcessError, FileNotFoundError):
        print("Winget installation failed or winget is not available.")
        return False


def install_with_package_manager():
    # First manager found on PATH wins
    candidates = [
        ("brew", ["brew", "install", "pandoc"]),
        ("apt-get", ["sudo", "apt-get", "install", "-y", "pandoc"]),
        ("dnf", ["sudo", "dnf", "install", "-y", "pandoc"]),
        ("pacman", ["sudo", "pacman", "-S", "--noconfirm", "pandoc"]),
    ]
    for tool, cmd in candidates:
        if not shutil.which(tool):
            continue
        print(f"Installing pandoc with {tool}...")
        try:
            subprocess.run(cmd, check=True)
            return True
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            print(f"{tool} failed: {e}")
            return False
    print("No supported package manager found.")
    return False


def install_python_packages():
    print("\n--- Installing Python packages ---")
    root = os.path.dirname(os.path.abspath(__file__))
    try:
        subprocess.run([sys.executable, "-m", "pip", "install", "-e", root], check=True)
    except subprocess.CalledProcessError as e:
        print(f"Warning: pip install failed: {e}")


def main():
    print("--- Paper Renderer Prerequisites Installer ---")

    install_python_packages()

    if check_pandoc():
        return

    print("\npandoc is used for the LaTeX rendering path (the Markdown path works without it).")
    installed = install_with_winget() if os.name == "nt" else install_with_package_manager()
    if not installed:
        print("\nCould not install automatically. Please install pandoc manually from https://pandoc.org/installing.html")
        webbrowser.open("https://pandoc.org/installing.html")
    elif not check_pandoc():
        print("\nAfter installation, you may need to restart your terminal so pandoc is on PATH.")


if __name__ == "__main__":
    main()
