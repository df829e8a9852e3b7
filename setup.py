"""
Setup file.
"""

import os

from setuptools import setup

URL = "https://github.com/gimport/gimport"
KEYWORDS = "gradle java jdk javac headless import build ci"
HERE = os.path.dirname(os.path.abspath(__file__))



if __name__ == "__main__":
    setup(
        keywords=KEYWORDS,
        url=URL,
        include_package_data=True)
