"""Staff domain - staff directory and performance reports"""
