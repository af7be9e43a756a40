"""This is the setup file"""

from setuptools import setup, find_packages

with open('README.md', 'r') as r:
    long_description = r.read()

setup(name='xodrnet',
      version='0.1.0',
      install_requires=[
          'numpy',
          'matplotlib',
          'shapely',
          'attrs',
      ],
      extras_require={
        'pyproj': ['pyproj'],
        'test': ['pytest'],
      },
      python_requires='>=3.8',
      packages=find_packages('src'),
      package_dir={'': 'src'},
      entry_points={
        'console_scripts': ['xodrnet = xodrnet.__main__:main'],
      },

      description='Road geometry and lane routing graphs from OpenDRIVE maps.',
      long_description=long_description,
      long_description_content_type='text/markdown',

      classifiers=[
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'License :: OSI Approved :: BSD License',
        'Operating System :: OS Independent',
        'Development Status :: 4 - Beta',
      ]
)
