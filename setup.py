from setuptools import setup


# Get the long description from the README file
def readme():
    with open('README.md') as f:
        return f.read()

setup(name='tangentparam',
      version='0.1.0',
      description='Quadrature-based polynomial convolution operators on triangle meshes',
      license='MIT',
      packages=['tangentparam',
                'tangentparam.operators',
                'tangentparam.geometry',
                'tangentparam.data',
                'tangentparam.visualization'],
      install_requires=[
          'scipy',
          'numpy',
          'matplotlib',
           ],
      extras_require={
          'test': ['pytest'],
      },
      python_requires='>=3.9',
      long_description=readme(),
      long_description_content_type='text/markdown',
      keywords='mesh geometry quadrature tangent-plane',
      classifiers=[
          # How mature is this project? Common values are
          #   3 - Alpha
          #   4 - Beta
          #   5 - Production/Stable
          'Development Status :: 3 - Alpha',

          'Intended Audience :: Science/Research',
          'Intended Audience :: Developers',
          'Topic :: Scientific/Engineering',
          'Topic :: Scientific/Engineering :: Mathematics',

          'License :: OSI Approved :: MIT License',

          'Programming Language :: Python :: 3.9',
      ],
      zip_safe=False)
