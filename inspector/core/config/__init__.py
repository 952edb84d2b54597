from .settings import ActionInputs, RunEnvironment, load_environment, load_inputs, load_settings
