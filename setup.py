from setuptools import setup, find_packages

import re

def version():
    with open('src/td0scan/__init__.py') as f:
        m = re.search(r"__version__ = '([^']+)'", f.read())
    assert m is not None
    return m.group(1)

setup(name = 'td0scan',
      python_requires = '>=3.9',
      version = version(),
      install_requires = [],
      extras_require = {
          'test': ['pytest']
      },
      packages = find_packages('src'),
      package_dir = { '': 'src' },
      package_data = { 'td0scan.data': ['*.cfg'] },
      entry_points= {
          'console_scripts': ['td0scan=td0scan.cli:main']
      }
)
