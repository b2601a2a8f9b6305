from setuptools import setup, find_packages

setup(
    name="dotrepeat",
    version="0.1.0",
    description="dotrepeat: repeat the last edit anywhere on an X11 desktop",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "python-xlib",
        "PyQt5",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "dotrepeat=dotrepeat.main:main",
        ],
    },
)
