import setuptools

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setuptools.setup(
    name="scale-qc",
    version="0.1.0",
    author="William Wieselquist",
    author_email="ww5@ornl.gov",
    description="QuickCheck-style randomized property testing",
    keywords="property testing, QuickCheck, shrinking, fuzzing",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_namespace_packages(include=["scale.qc", "scale.qc.*"]),
    package_data={"scale.qc": ["templates/*"]},
    classifiers=[
        # see https://pypi.org/classifiers/
        "Development Status :: 1 - Planning",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Testing",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3 :: Only",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "click",
        "pydantic>=2",
        "structlog",
        "tqdm",
        "jinja2",
        "typing_extensions",
    ],
    extras_require={
        "test": ["pytest", "pytest-mock", "hypothesis"],
    },
    entry_points={
        "console_scripts": ["scale-qc=scale.qc.__main__:cli"],
    },
)
