from setuptools import setup, find_packages

setup(
    name="mm-e2e-cli",
    version="0.1.0",
    description="Mattermost user API helpers for end-to-end test setup",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=["InquirerPy", "tqdm"],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": [
            "mm-e2e=mm_e2e_cli.__main__:main",
        ]
    },
)
