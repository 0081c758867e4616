from pygments.style import Style
from pygments.token import Keyword, Name, Number, Punctuation, String, Token


class LogStyle(Style):
    styles = {
        Token: "#bcbcbc",
        Punctuation: "#808080",
        Name.Tag: "#5fafd7",
        String: "#87af5f",
        String.Double: "#87af5f",
        Number: "#d7af5f",
        Keyword.Constant: "#af87d7",
    }
