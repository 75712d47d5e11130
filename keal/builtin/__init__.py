"""Built-in plugins: applications, plugin list, session actions, dmenu input and user programs."""