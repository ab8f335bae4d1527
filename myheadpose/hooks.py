# myheadpose/hooks.py

from typing import Callable, List

import numpy as np


class Hooks:
    def __init__(self):
        self.before_detect: List[Callable] = []
        self.after_detect: List[Callable] = []
        self.after_pose: List[Callable] = []

    def register_before_detect(self, func: Callable):
        self.before_detect.append(func)

    def register_after_detect(self, func: Callable):
        self.after_detect.append(func)

    def register_after_pose(self, func: Callable):
        self.after_pose.append(func)

    def execute_before_detect(self, image):
        for func in self.before_detect:
            image = func(image)
        return image

    def execute_after_detect(self, landmark_sets: List[np.ndarray]):
        for func in self.after_detect:
            func(landmark_sets)

    def execute_after_pose(self, face_index: int, pose: np.ndarray):
        for func in self.after_pose:
            func(face_index, pose)
