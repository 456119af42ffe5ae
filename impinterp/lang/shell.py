"""Handles interactive/command-line mode for the Imp interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Imp interpreter shell."""
    intro = "Imp interpreter :: Python backend\nType 'help' for more information."
    prompt = "imp # "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "imp # "   # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def default(self, line):
        """Executes arbitrary Imp input."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            line, add_to_prev = self.sess.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
            else:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                try:
                    self.sess.add(line, self.line_num)
                except ValueError:
                    return  # if line is empty, terminate

                self.sess.run()

    def _is_input(self, arg):
        """Whether or not the current command word is really the start of Imp input (ex: 'vars = 3')."""
        return bool(arg) or bool(self._tmp_line)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        if self._is_input(arg):
            return self.default(self.lastcmd)

        print("Welcome to the Imp interpreter!\n\n"
              "Imp is a small imperative language with integers, booleans, blocks and loops.\n"
              "Every line is evaluated right away and its result printed as 'name : type = value'.\n\n"
              "  let x = 1               immutable binding\n"
              "  let mut i = 0           mutable binding\n"
              "  i = i + 1               mutation\n"
              "  if i < 3 {1} else {2}   conditional\n"
              "  while i < 10 {i = i+1}  loop\n"
              "  { let x = 2; x }        nested block with its own scope\n\n"
              "Type 'vars' to list variables in scope and 'exit' to quit.")

    def do_vars(self, arg):
        """Lists variables currently in scope."""
        if self._is_input(arg):
            return self.default(self.lastcmd)

        for name, (value, mutable) in self.sess.namespace.bindings().items():
            print(f"{name} : {value.type_tag} = {value}" + (" (mut)" if mutable else ""))

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return True

    def do_exit(self, arg):
        """Exits interpreter."""
        if self._is_input(arg):
            return self.default(self.lastcmd)
        return True
