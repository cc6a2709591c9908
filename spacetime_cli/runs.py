import os
from datetime import datetime


def get_target_run_folder(application_name: str, base_dir: str = "./runs") -> str:
    # runs is datetime generated folder in the application name folder
    target_run_folder = os.path.join(
        base_dir, application_name, datetime.now().strftime('%Y%m%d_%H%M%S')
    )
    os.makedirs(target_run_folder, exist_ok=True)
    return target_run_folder
