import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="job-dispatch",
    version="0.3.0",
    author="",
    author_email="",
    description="Dispatch one-shot Kubernetes jobs from cronjob and deployment specs",
    long_description=long_description,
    long_description_content_type="text/markdown",
    include_package_data=True,
    install_requires=[
        'attrs>=22.2',
        'click>=8.0',
        'kubernetes>=26.1',
        'PyYAML',
        'rich',
        'urllib3',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-mock',
        ],
    },
    entry_points={
        'console_scripts': [
            'job-dispatch=job_dispatch.cli:cli',
        ],
    },
    packages=setuptools.find_packages(include=["job_dispatch", "job_dispatch.*"]),
    python_requires='>=3.9',
)
