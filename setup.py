from setuptools import setup, find_packages

setup(
    name="myheadpose",
    version="0.1.0",
    packages=find_packages(exclude=["tests"]),
    install_requires=[
        "requests",
        "numpy",
        "opencv-python",
        "Pillow",
    ],
    extras_require={
        # DlibLandmarkDetector; any other LandmarkDetector works without it
        "dlib": ["dlib"],
        "test": ["pytest"],
    },
    author="YourName",
    author_email="you@example.com",
    description="Head pose estimation from 68-point facial landmarks with OpenCV solvePnP",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.7",
)
